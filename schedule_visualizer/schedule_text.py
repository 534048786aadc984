"""
Parse schedule text copy-pasted from the enrollment portal (or recognized by
OCR) into a list of CourseSession records.

Four layouts are recognized, checked in this order:

- Table (study load): seven fields per course, one per line
    Subject Code / Description / Lec Units / Lab Units / Credited Units /
    Room # / Schedule ("Tue, Sat: 03:00PM - 04:30PM")
- Block (enrollment summary):
    IT332
    G1
    C0
    Web Development
    3
    TH 08:00 AM - 10:00 AM,
    NGE207,
    Online
- Multi-line portal: "CCS" college code, "BACHELOR OF SCIENCE ..." program,
  course code, title, section, then day / time / room lines.
- Simple: one course per line, "IT101 Intro M W 08:00 AM 10:00 AM NGE101".

None of the extractors raise on odd input: lines that do not fit are skipped.
When nothing is found, bare course codes are returned as TBA records.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List

from .models import CourseSession, TBA
from .tokens import (
    BLOCK_CODE_RE,
    COMPOSITE_SECTION_RE,
    SECTION_RE,
    STRICT_CODE_RE,
    clean_code,
    find_department_codes,
    is_day,
    is_room,
    is_time,
    normalize_time,
    parse_day_string,
    parse_time_range,
)

logger = logging.getLogger(__name__)

FORMAT_TABLE = "table"
FORMAT_BLOCK = "block"
FORMAT_MULTILINE = "multiline"
FORMAT_SIMPLE = "simple"


@dataclass
class ParseResult:
    format: str
    sessions: List[CourseSession] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def missing_sections(self) -> bool:
        """Study-load tables never carry section labels."""
        return self.format == FORMAT_TABLE and bool(self.sessions)


def split_lines(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


# ──────────────────────────────────────────────────────────────────
#  Format detection
# ──────────────────────────────────────────────────────────────────

_TABLE_HEADER_KEYWORDS = [
    "subject code", "description", "lec units", "lab units",
    "credited units", "room #", "schedule",
]
# Header skipping also accepts the short forms seen on wrapped headers.
_TABLE_HEADER_SKIP_KEYWORDS = [
    "subject code", "description", "lec units", "lab units",
    "credited units", "credited", "room #", "room", "schedule",
]
_TABLE_HEADER_WINDOW = 15


def is_table_format(lines: List[str]) -> bool:
    head = [l.lower() for l in lines[:_TABLE_HEADER_WINDOW]]
    found = 0
    for keyword in _TABLE_HEADER_KEYWORDS:
        squashed = keyword.replace(" ", "", 1)
        if any(keyword in line or line == squashed for line in head):
            found += 1
    return found >= 3


def is_block_format(lines: List[str]) -> bool:
    for current, following in zip(lines, lines[1:]):
        if BLOCK_CODE_RE.match(current) and (
            SECTION_RE.match(following) or COMPOSITE_SECTION_RE.match(following)
        ):
            return True
    return False


def is_multiline_format(lines: List[str], text: str) -> bool:
    return "BACHELOR OF SCIENCE" in text and "CCS" in lines


def detect_format(lines: List[str], text: str | None = None) -> str:
    """Pick exactly one layout; table and block anchors win over the rest."""
    if text is None:
        text = "\n".join(lines)
    if is_table_format(lines):
        return FORMAT_TABLE
    if is_block_format(lines):
        return FORMAT_BLOCK
    if is_multiline_format(lines, text):
        return FORMAT_MULTILINE
    return FORMAT_SIMPLE


# ──────────────────────────────────────────────────────────────────
#  Table format
# ──────────────────────────────────────────────────────────────────

_TABLE_FIELDS = 7

_TABLE_DAY_NAMES = {
    "monday": "M", "mon": "M",
    "tuesday": "T", "tue": "T", "tu": "T",
    "wednesday": "W", "wed": "W",
    "thursday": "TH", "thu": "TH", "thur": "TH", "thurs": "TH",
    "friday": "F", "fri": "F",
    "saturday": "S", "sat": "S",
    "sunday": "SU", "sun": "SU",
}

_TABLE_SEGMENT_RE = re.compile(
    r"([A-Za-z,\s]+):\s*(\d{1,2}:\d{2}\s*(?:AM|PM))\s*[-–]\s*(\d{1,2}:\d{2}\s*(?:AM|PM))",
    re.I,
)


def _table_data_start(lines: List[str]) -> int:
    start = 0
    for i, line in enumerate(lines[:_TABLE_HEADER_WINDOW]):
        lower = line.lower()
        if any(kw in lower for kw in _TABLE_HEADER_SKIP_KEYWORDS):
            start = i + 1
    return start


def parse_table_days(text: str) -> List[str]:
    """'Tue, Sat' -> ['T', 'S']; unknown words are dropped."""
    days: List[str] = []
    for part in re.split(r"[,\s]+", text or ""):
        code = _TABLE_DAY_NAMES.get(part.strip().lower())
        if code:
            days.append(code)
    return days


def parse_table_schedule(schedule: str) -> List[tuple[List[str], str, str]]:
    """
    Parse a table schedule cell into (days, start, end) sessions, one per day.

    "Thu: 08:00AM - 10:00AM, Sat: 08:00AM - 11:00AM" -> two sessions
    "Tue, Sat: 03:00PM - 04:30PM"                    -> two sessions
    A segment whose days cannot be read keeps its times under ["TBA"].
    """
    sessions: List[tuple[List[str], str, str]] = []
    for m in _TABLE_SEGMENT_RE.finditer(schedule or ""):
        start = normalize_time(m.group(2).strip())
        end = normalize_time(m.group(3).strip())
        days = parse_table_days(m.group(1).strip())
        if not days:
            sessions.append(([TBA], start, end))
            continue
        for day in days:
            sessions.append(([day], start, end))
    return sessions


def parse_table_format(lines: List[str]) -> List[CourseSession]:
    data = lines[_table_data_start(lines):]
    logger.debug("Table data starts after %d header line(s)", len(lines) - len(data))
    records: List[CourseSession] = []

    for i in range(0, len(data) - _TABLE_FIELDS + 1, _TABLE_FIELDS):
        code, title, _lec, _lab, _credited, room, schedule = data[i:i + _TABLE_FIELDS]
        if not (re.search(r"[A-Za-z]", code) and re.search(r"\d", code)):
            logger.debug("Skipping table row with invalid code %r", code)
            continue
        code = clean_code(code)
        rooms = [r.strip() for r in room.split(",")] if room else [TBA]

        sessions = parse_table_schedule(schedule)
        if not sessions:
            records.append(CourseSession(
                code=code, title=title, room=rooms[0] or TBA, is_tba=True,
            ))
            continue

        for index, (days, start, end) in enumerate(sessions):
            assigned = rooms[index] if index < len(rooms) and rooms[index] else rooms[0]
            records.append(CourseSession(
                code=code,
                title=title,
                days=tuple(days),
                start_time=start,
                end_time=end,
                room=assigned or TBA,
                is_tba=days == [TBA],
            ))
    return records


# ──────────────────────────────────────────────────────────────────
#  Block format
# ──────────────────────────────────────────────────────────────────

_NUMBER_RE = re.compile(r"^\d+\.?\d*$")
_CREDIT_CODE_RE = re.compile(r"^C\d+$")
_MODE_RE = re.compile(r"^(Online|In-Person|Hybrid)$")
_KNOWN_ROOM_PREFIX_RE = re.compile(r"^(NGE|GLE|RTL|SJ|AS|PE-)\d*[A-Z]?", re.I)
_KNOWN_ROOM_NAME_RE = re.compile(r"^(ONLINE|TBA|CASEROOM|FIELD)$", re.I)
_BLOCK_SCHEDULE_RE = re.compile(
    r"^([A-Z]+)\s+(\d{1,2}:\d{2}\s*(?:AM|PM))\s*[-–]\s*(\d{1,2}:\d{2}\s*(?:AM|PM))",
    re.I,
)


def _strip_trailing_comma(line: str) -> str:
    return re.sub(r",\s*$", "", line).strip()


def _is_block_room(line: str) -> bool:
    # Known rooms first so NGE207 is never read as the next course code.
    return bool(_KNOWN_ROOM_PREFIX_RE.match(line) or _KNOWN_ROOM_NAME_RE.match(line))


def parse_block_format(lines: List[str]) -> List[CourseSession]:
    records: List[CourseSession] = []
    n = len(lines)
    i = 0

    while i < n:
        if not BLOCK_CODE_RE.match(lines[i]):
            i += 1
            continue
        code = lines[i]
        i += 1

        section = ""
        if i < n and (SECTION_RE.match(lines[i]) or COMPOSITE_SECTION_RE.match(lines[i])):
            section = lines[i]
            i += 1

        if i < n and _CREDIT_CODE_RE.match(lines[i]):
            i += 1

        title = ""
        if i < n and not _NUMBER_RE.match(lines[i]):
            title = lines[i]
            i += 1

        while i < n and _NUMBER_RE.match(lines[i]):
            i += 1

        schedule_lines: List[str] = []
        while i < n and is_time(lines[i]):
            schedule_lines.append(_strip_trailing_comma(lines[i]))
            i += 1

        rooms: List[str] = []
        while i < n:
            candidate = _strip_trailing_comma(lines[i])
            if _MODE_RE.match(candidate) or not _is_block_room(candidate):
                break
            rooms.append(candidate)
            i += 1

        if i < n and _MODE_RE.match(lines[i]):
            i += 1

        logger.debug(
            "Block %s %s: %d schedule line(s), rooms=%s",
            code, section, len(schedule_lines), rooms,
        )

        if not schedule_lines:
            records.append(CourseSession(code=code, section=section, title=title, is_tba=True))
            continue

        for index, schedule in enumerate(schedule_lines):
            m = _BLOCK_SCHEDULE_RE.match(schedule)
            if not m:
                logger.debug("Unreadable schedule line %r for %s", schedule, code)
                continue
            room = rooms[index] if index < len(rooms) else (rooms[0] if rooms else "")
            records.append(CourseSession(
                code=code,
                section=section,
                title=title,
                days=tuple(parse_day_string(m.group(1))),
                start_time=normalize_time(m.group(2)),
                end_time=normalize_time(m.group(3)),
                room=room,
            ))
    return records


# ──────────────────────────────────────────────────────────────────
#  Multi-line portal format
# ──────────────────────────────────────────────────────────────────

_PORTAL_SECTION_RE = re.compile(r"^G\d+$")
_COLLEGE_CODE_RE = re.compile(r"^[A-Z]{2,4}$")
_PORTAL_METADATA = ("Online", "In-Person", "N", "Y")


def _opens_portal_record(lines: List[str], i: int) -> bool:
    if lines[i] == "CCS":
        return True
    return bool(
        _COLLEGE_CODE_RE.match(lines[i])
        and i + 1 < len(lines)
        and "BACHELOR" in lines[i + 1]
    )


def _is_portal_metadata(line: str) -> bool:
    return line.isdigit() or line in _PORTAL_METADATA or bool(_CREDIT_CODE_RE.match(line))


def parse_multiline_format(lines: List[str]) -> List[CourseSession]:
    records: List[CourseSession] = []
    n = len(lines)
    i = 0

    while i < n:
        if not _opens_portal_record(lines, i):
            i += 1
            continue
        i += 1

        if i < n and ("BACHELOR" in lines[i] or "SCIENCE" in lines[i]):
            i += 1

        if i >= n or not STRICT_CODE_RE.match(lines[i]):
            i += 1
            continue
        code = lines[i]
        i += 1

        title = lines[i] if i < n else ""
        i += 1

        section = ""
        if i < n and _PORTAL_SECTION_RE.match(lines[i]):
            section = lines[i]
            i += 1

        days: List[str] = []
        while i < n and is_day(lines[i]):
            days.extend(parse_day_string(lines[i]))
            i += 1

        times: List[str] = []
        while i < n and is_time(lines[i]):
            times.append(lines[i])
            i += 1

        rooms: List[str] = []
        while i < n and is_room(lines[i]):
            rooms.append(lines[i])
            i += 1

        while i < n and _is_portal_metadata(lines[i]):
            i += 1

        if not days:
            records.append(CourseSession(
                code=code, section=section, title=title, days=(TBA,), is_tba=True,
            ))
            continue

        # Days past the last time/room reuse the first one.
        for j, day in enumerate(days):
            time_line = times[j] if j < len(times) else (times[0] if times else "")
            room = rooms[j] if j < len(rooms) else (rooms[0] if rooms else "")
            start, end = parse_time_range(time_line) or ("", "")
            records.append(CourseSession(
                code=code,
                section=section,
                title=title,
                days=(day,),
                start_time=start,
                end_time=end,
                room=room,
            ))
    return records


# ──────────────────────────────────────────────────────────────────
#  Simple one-line format
# ──────────────────────────────────────────────────────────────────

_SIMPLE_HEADERS = ("course code", "course title", "program offered")
_SIMPLE_CODE_RE = re.compile(r"\b([A-Z]{2,4}\s?\d{3,4}[A-Z]?)\b", re.I)
_SIMPLE_TIME_RE = re.compile(r"(\d{1,2}:\d{2}\s*(?:AM|PM))", re.I)
_SIMPLE_ROOM_RE = re.compile(r"\b(ONLINE|NGE\s?\d+|CASEROOM|FIELD)\s*(LEC|LAB)?", re.I)
_DAY_RUN_RE = re.compile(r"\b(?:(?:TH|SU|[MTWFS])\s*)+\b")

# (code, substrings) checked against the whole upper-cased line.
_FULL_DAY_NAMES = [
    ("TH", ("THURSDAY", "THU")),
    ("SU", ("SUNDAY", "SUN")),
    ("M", ("MONDAY", "MON")),
    ("T", ("TUESDAY", "TUE")),
    ("W", ("WEDNESDAY", "WED")),
    ("F", ("FRIDAY", "FRI")),
    ("S", ("SATURDAY", "SAT")),
]


def extract_days_from_text(text: str) -> List[str]:
    """
    Find meeting days anywhere in a line.

    Day names (and their first three letters) are looked for as plain
    substrings; only when none is present are standalone letter runs like
    "M W F" or "T TH" read, where TH hides a bare T and SU hides a bare S.
    """
    upper = (text or "").upper()
    days: List[str] = []
    for code, names in _FULL_DAY_NAMES:
        if any(name in upper for name in names) and code not in days:
            days.append(code)
    if days:
        return days

    runs = _DAY_RUN_RE.findall(upper)
    if not runs:
        return days
    run_text = " ".join(runs)
    if "TH" in run_text:
        days.append("TH")
    if "SU" in run_text:
        days.append("SU")
    if re.search(r"\bM\b", run_text):
        days.append("M")
    if re.search(r"\bT\b", run_text) and "TH" not in days:
        days.append("T")
    if re.search(r"\bW\b", run_text):
        days.append("W")
    if re.search(r"\bF\b", run_text):
        days.append("F")
    if re.search(r"\bS\b", run_text) and "SU" not in days:
        days.append("S")
    return days


def parse_simple_format(lines: List[str]) -> List[CourseSession]:
    records: List[CourseSession] = []
    for line in lines:
        lower = line.lower()
        if any(h in lower for h in _SIMPLE_HEADERS):
            continue

        m = _SIMPLE_CODE_RE.search(line)
        if not m:
            continue
        code = clean_code(m.group(1))
        if not STRICT_CODE_RE.match(code):
            continue

        times = _SIMPLE_TIME_RE.findall(line)
        start = end = ""
        if len(times) >= 2:
            start, end = normalize_time(times[0]), normalize_time(times[1])

        days = extract_days_from_text(line)
        room_match = _SIMPLE_ROOM_RE.search(line)
        records.append(CourseSession(
            code=code,
            days=tuple(days),
            start_time=start,
            end_time=end,
            room=room_match.group(0).strip() if room_match else "",
            is_tba=not days and not start,
        ))
    return records


# ──────────────────────────────────────────────────────────────────
#  Fallback / public API
# ──────────────────────────────────────────────────────────────────

def fallback_course_codes(text: str) -> List[CourseSession]:
    """One TBA record per distinct department-prefixed code, in first-seen order."""
    return [CourseSession(code=code, is_tba=True) for code in find_department_codes(text)]


_EXTRACTORS = {
    FORMAT_TABLE: parse_table_format,
    FORMAT_BLOCK: parse_block_format,
    FORMAT_MULTILINE: parse_multiline_format,
    FORMAT_SIMPLE: parse_simple_format,
}


def extract_schedule(text: str) -> ParseResult:
    """
    Detect the layout of `text`, run its extractor and fall back to bare
    course codes when the extractor finds nothing.
    """
    text = (text or "").replace("\r", "")
    lines = split_lines(text)
    fmt = detect_format(lines, text)
    logger.debug("Detected %s format (%d lines)", fmt, len(lines))

    sessions = _EXTRACTORS[fmt](lines)
    if sessions:
        return ParseResult(format=fmt, sessions=sessions)

    sessions = fallback_course_codes(" ".join(lines))
    if sessions:
        logger.info("No %s records found; using %d bare course code(s)", fmt, len(sessions))
    return ParseResult(format=fmt, sessions=sessions, used_fallback=bool(sessions))


def parse_schedule_text(text: str) -> List[CourseSession]:
    """Parse pasted schedule text. Returns [] when nothing was recognized."""
    return extract_schedule(text).sessions
