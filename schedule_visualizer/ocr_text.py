"""
Extract courses from raw OCR output of a schedule screenshot.

OCR text rarely keeps the portal's line structure, so instead of a layout
grammar each line holding a course code is read together with the next few
lines, and sessions are collected from whatever time ranges, day letters and
rooms show up in that window.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .models import CourseSession
from .schedule_text import fallback_course_codes, split_lines
from .tokens import DEPARTMENT_CODE_RE, TIME_RANGE_RE, clean_code, normalize_time

logger = logging.getLogger(__name__)

_WINDOW = 5
_TITLE_LIMIT = 50
_HEADER_PHRASES = ("course code", "course title", "schedule")

_SECTION_RE = re.compile(r"\b(G\d+)\b", re.I)
_DAY_LETTER_RE = re.compile(r"\b([MTWFS]|TH)\b")
_ROOM_RE = re.compile(r"\b(ONLINE|NGE\d*|CASEROOM|FIELD)\s*(LEC|LAB)?", re.I)
_TITLE_RE = re.compile(r"^\s*([A-Za-z\s&,]+)")


def _session_key(session: CourseSession) -> tuple:
    return session.code, session.start_time, tuple(session.days)


def is_duplicate(sessions: Iterable[CourseSession], candidate: CourseSession) -> bool:
    """Same course, same start time and the same day sequence."""
    key = _session_key(candidate)
    return any(_session_key(s) == key for s in sessions)


def merge_sessions(
    existing: List[CourseSession], incoming: Iterable[CourseSession]
) -> List[CourseSession]:
    """Append incoming sessions that are not duplicates of ones already kept."""
    merged = list(existing)
    for session in incoming:
        if not is_duplicate(merged, session):
            merged.append(session)
    return merged


def _data_lines(text: str) -> List[str]:
    out = []
    for line in split_lines(text.replace("\r", "")):
        lower = line.lower()
        if any(p in lower for p in _HEADER_PHRASES) or len(line) <= 2:
            continue
        out.append(line)
    return out


def _title_after(line: str, code_match: re.Match) -> str:
    rest = line[code_match.end():]
    m = _TITLE_RE.match(rest)
    return m.group(1).strip()[:_TITLE_LIMIT] if m else ""


def parse_ocr_text(text: str) -> List[CourseSession]:
    """
    Parse OCR text into sessions; the t-th time range pairs with the t-th day
    letter found near the course code (or the first one when they run out).
    """
    data_lines = _data_lines(text or "")
    records: List[CourseSession] = []

    for i, line in enumerate(data_lines):
        code_match = DEPARTMENT_CODE_RE.search(line)
        if not code_match:
            continue
        code = clean_code(code_match.group(1) + code_match.group(2))
        window = " ".join(data_lines[i:i + _WINDOW])

        sec = _SECTION_RE.search(window)
        section = sec.group(1).upper() if sec else ""

        days: List[str] = []
        for m in _DAY_LETTER_RE.finditer(window):
            if m.group(1) not in days:
                days.append(m.group(1))

        room_match = _ROOM_RE.search(window)
        room = room_match.group(0).strip() if room_match else ""
        title = _title_after(line, code_match)
        ranges = TIME_RANGE_RE.findall(window)

        if ranges:
            for t, (raw_start, raw_end) in enumerate(ranges):
                if days:
                    session_days = (days[t],) if t < len(days) else (days[0],)
                else:
                    session_days = ()
                candidate = CourseSession(
                    code=code,
                    section=section,
                    title=title,
                    days=session_days,
                    start_time=normalize_time(raw_start),
                    end_time=normalize_time(raw_end),
                    room=room,
                )
                if is_duplicate(records, candidate):
                    logger.debug("Dropping duplicate OCR session %s %s", code, candidate.start_time)
                    continue
                records.append(candidate)
        elif days and not any(r.code == code for r in records):
            records.append(CourseSession(
                code=code, section=section, title=title, days=tuple(days), room=room,
            ))

    if not records:
        records = fallback_course_codes(" ".join(split_lines(text or "")))
        if records:
            logger.info("OCR text had no schedule rows; using %d bare course code(s)", len(records))
    return records
