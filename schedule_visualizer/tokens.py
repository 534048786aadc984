"""
Token-level helpers shared by the text extractors: time literals, day codes,
room literals and course codes.

Day codes are the portal's single/compound letters:
    M  T  W  TH  F  S  SU
so "TTH" is Tuesday + Thursday and "THS" is Thursday + Saturday.
"""
from __future__ import annotations

import re
from typing import List

# ──────────────────────────────────────────────────────────────────
#  Patterns
# ──────────────────────────────────────────────────────────────────

# Strict course code accepted from the portal and simple formats.
STRICT_CODE_RE = re.compile(r"^[A-Z]{2,4}\d{3,4}[A-Z]?$")
# Course code line in the block format (wider letter/digit ranges).
BLOCK_CODE_RE = re.compile(r"^[A-Z]{2,6}\d{2,4}[A-Z]?$")
# Section lines: G1 / D3, or composite sections like CCS-SAT-AM1.
SECTION_RE = re.compile(r"^[GD]\d+$")
COMPOSITE_SECTION_RE = re.compile(r"^[A-Z]{2,4}-[A-Z]{2,4}-[A-Z0-9]+$", re.I)

DEPARTMENT_PREFIXES = ("CSIT", "IT", "CS", "MATH", "ENG", "SCI", "PHIL", "PE", "GE", "FIL", "NSTP")
DEPARTMENT_CODE_RE = re.compile(
    r"\b(" + "|".join(DEPARTMENT_PREFIXES) + r")\s?(\d{3,4}[A-Z]?)\b", re.I
)

TIME_LITERAL = r"\d{1,2}:\d{2}\s*(?:AM|PM)"
TIME_RE = re.compile(r"\d{1,2}:\d{2}\s*(AM|PM)", re.I)
TIME_RANGE_RE = re.compile(
    r"(" + TIME_LITERAL + r")\s*[-–—]\s*(" + TIME_LITERAL + r")", re.I
)

_DAY_TOKEN_RE = re.compile(
    r"^(M|T|W|TH|F|S|SU|THS|MS|MWF|TTH|MW|TS|WF|MTW|MTWTH|MTWTHF)+$"
)
_ROOM_SHAPE_RE = re.compile(
    r"^(ONLINE|NGE|CASEROOM|FIELD|ROOM|[A-Z]+\d+)\s*(LEC|LAB|LECTURE|LABORATORY)?", re.I
)

_COMPOUND_DAYS = {
    "MTWTHF": ["M", "T", "W", "TH", "F"],
    "MTWTH": ["M", "T", "W", "TH"],
    "MTW": ["M", "T", "W"],
    "THS": ["TH", "S"],
    "TTH": ["T", "TH"],
    "MWF": ["M", "W", "F"],
    "MW": ["M", "W"],
    "MS": ["M", "S"],
    "TS": ["T", "S"],
    "WF": ["W", "F"],
    "TH": ["TH"],
    "SU": ["SU"],
    "M": ["M"],
    "T": ["T"],
    "W": ["W"],
    "F": ["F"],
    "S": ["S"],
}
_SINGLE_LETTER_DAYS = ("M", "T", "W", "F", "S")


# ──────────────────────────────────────────────────────────────────
#  Time
# ──────────────────────────────────────────────────────────────────

def normalize_time(time_str: str) -> str:
    """
    Normalize '8:00 AM', '02:30PM', '2 PM' or '14:00' to 24-hour 'HH:MM'.

    Without AM/PM the hour is kept as written. Anything unrecognized comes
    back trimmed and uppercased.
    """
    if not time_str:
        return ""
    t = time_str.strip().upper()
    if re.match(r"^\d{2}:\d{2}$", t):
        return t

    m = re.search(r"(\d{1,2}):(\d{2})\s*(AM|PM)?", t)
    if not m:
        m = re.search(r"(\d{1,2})()\s*(AM|PM)", t)
    if not m:
        return t

    hour = int(m.group(1))
    minutes = m.group(2) or "00"
    period = m.group(3)
    if period == "PM" and hour != 12:
        hour += 12
    elif period == "AM" and hour == 12:
        hour = 0
    return f"{hour:02d}:{minutes}"


def parse_time_range(text: str) -> tuple[str, str] | None:
    """Parse 'HH:MM AM - HH:MM PM' (hyphen, en or em dash) into normalized times."""
    m = TIME_RANGE_RE.search(text or "")
    if not m:
        return None
    return normalize_time(m.group(1)), normalize_time(m.group(2))


def is_time(text: str) -> bool:
    return bool(text) and bool(TIME_RE.search(text))


# ──────────────────────────────────────────────────────────────────
#  Days
# ──────────────────────────────────────────────────────────────────

def parse_day_string(text: str) -> List[str]:
    """
    Split a day token into day codes, reading TH and SU before T and S.

    >>> parse_day_string("THS")
    ['TH', 'S']
    >>> parse_day_string("TTH")
    ['T', 'TH']
    """
    upper = (text or "").strip().upper()
    if not upper or upper.isdigit():
        return []
    if upper in _COMPOUND_DAYS:
        return list(_COMPOUND_DAYS[upper])

    days: List[str] = []
    i = 0
    while i < len(upper):
        pair = upper[i:i + 2]
        if pair in ("TH", "SU"):
            day = pair
            i += 2
        elif upper[i] in _SINGLE_LETTER_DAYS:
            day = upper[i]
            i += 1
        else:
            i += 1
            continue
        if day not in days:
            days.append(day)
    return days


def is_day(text: str) -> bool:
    if not text:
        return False
    cleaned = text.strip().upper()
    if cleaned.isdigit():
        return False
    return bool(_DAY_TOKEN_RE.match(cleaned))


# ──────────────────────────────────────────────────────────────────
#  Rooms / codes
# ──────────────────────────────────────────────────────────────────

def is_room(text: str) -> bool:
    if not text:
        return False
    return bool(_ROOM_SHAPE_RE.match(text.strip().upper()))


def clean_code(code: str) -> str:
    """'cs 101' -> 'CS101'."""
    return re.sub(r"\s", "", code or "").upper()


def find_department_codes(text: str) -> List[str]:
    """All department-prefixed course codes in text, first-seen order, no repeats."""
    codes: List[str] = []
    for m in DEPARTMENT_CODE_RE.finditer(text or ""):
        code = clean_code(m.group(1) + m.group(2))
        if code not in codes:
            codes.append(code)
    return codes
