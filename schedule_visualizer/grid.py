"""
Place course sessions on the weekly grid: 7 days x 07:00-22:00 in
30-minute cells keyed by (day name, hour, minute bucket 0/30).

TBA sessions, sessions on unknown days and sessions whose times cannot be
read stay in the course list but are left off the grid.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .models import DAY_NAMES, CourseSession

START_HOUR = 7
END_HOUR = 22
SLOT_MINUTES = 30
GRID_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

CellKey = Tuple[str, int, int]


@dataclass(frozen=True)
class Placement:
    session: CourseSession
    day: str
    start_minutes: int
    end_minutes: int

    @property
    def offset(self) -> float:
        """Start offset inside the first cell, as a fraction of a cell."""
        return (self.start_minutes % SLOT_MINUTES) / SLOT_MINUTES

    @property
    def span(self) -> float:
        """Height of the block in cells."""
        return (self.end_minutes - self.start_minutes) / SLOT_MINUTES

    @property
    def is_online(self) -> bool:
        return "ONLINE" in self.session.room.upper()


@dataclass(frozen=True)
class Conflict:
    code: str
    section: str
    day: str
    start_time: str
    end_time: str


def time_to_minutes(time_str: str) -> Optional[int]:
    if not time_str:
        return None
    m = re.search(r"(\d{1,2}):(\d{2})", time_str)
    if not m:
        return None
    return int(m.group(1)) * 60 + int(m.group(2))


def format_time_display(time_str: str) -> str:
    """'14:30' -> '2:30 PM'."""
    if not time_str:
        return ""
    m = re.match(r"^(\d{1,2}):(\d{2})$", time_str)
    if not m:
        return time_str
    h, minutes = int(m.group(1)), m.group(2)
    period = "PM" if h >= 12 else "AM"
    display = h - 12 if h > 12 else (12 if h == 0 else h)
    return f"{display}:{minutes} {period}"


def grid_cells() -> List[CellKey]:
    return [
        (day, hour, minute)
        for hour in range(START_HOUR, END_HOUR)
        for minute in (0, SLOT_MINUTES)
        for day in GRID_DAYS
    ]


def _placements(session: CourseSession) -> List[Placement]:
    if session.is_tba:
        return []
    start = time_to_minutes(session.start_time)
    end = time_to_minutes(session.end_time)
    if start is None or end is None:
        return []
    out = []
    for code in session.days:
        day = DAY_NAMES.get(code)
        if day:
            out.append(Placement(session, day, start, end))
    return out


def build_grid(sessions: Iterable[CourseSession]) -> Dict[CellKey, List[Placement]]:
    """
    Map each grid cell to the blocks starting in it. Blocks starting before
    07:00 or after 21:30 have no cell and are dropped.
    """
    cells: Dict[CellKey, List[Placement]] = {key: [] for key in grid_cells()}
    for session in sessions:
        for p in _placements(session):
            minute = SLOT_MINUTES if p.start_minutes % 60 >= SLOT_MINUTES else 0
            key = (p.day, p.start_minutes // 60, minute)
            if key in cells:
                cells[key].append(p)
    return cells


def find_conflict(session: CourseSession, others: Iterable[CourseSession]) -> Optional[Conflict]:
    """First session in `others` overlapping `session` on a shared day, ignoring the same course."""
    if session.is_tba or not session.days:
        return None
    start1 = time_to_minutes(session.start_time)
    end1 = time_to_minutes(session.end_time)
    if start1 is None or end1 is None:
        return None

    for other in others:
        if other.is_tba or not other.days or other.code == session.code:
            continue
        start2 = time_to_minutes(other.start_time)
        end2 = time_to_minutes(other.end_time)
        if start2 is None or end2 is None:
            continue
        for day in session.days:
            if day in other.days and start1 < end2 and start2 < end1:
                return Conflict(
                    code=other.code,
                    section=other.section,
                    day=DAY_NAMES.get(day, day),
                    start_time=other.start_time,
                    end_time=other.end_time,
                )
    return None


def find_conflicts(
    first: Iterable[CourseSession], second: Iterable[CourseSession]
) -> List[Tuple[CourseSession, Conflict]]:
    second = list(second)
    out = []
    for session in first:
        conflict = find_conflict(session, second)
        if conflict:
            out.append((session, conflict))
    return out


def calculate_total_hours(sessions: Iterable[CourseSession]) -> float:
    """Weekly hours of the timed, non-TBA sessions, one decimal."""
    total = 0
    for s in sessions:
        if s.is_tba:
            continue
        start = time_to_minutes(s.start_time)
        end = time_to_minutes(s.end_time)
        if start is not None and end is not None:
            total += end - start
    return round(total / 60, 1)


def render_text(sessions: Iterable[CourseSession], width: int = 12) -> str:
    """Plain-text weekly grid, one row per 30-minute cell."""
    grid = build_grid(sessions)
    header = "Time    | " + " | ".join(d[:3].ljust(width) for d in GRID_DAYS)
    rows = [header, "-" * len(header)]
    for hour in range(START_HOUR, END_HOUR):
        for minute in (0, SLOT_MINUTES):
            label = f"{hour:02d}:{minute:02d}".ljust(7)
            cells = []
            for day in GRID_DAYS:
                blocks = grid[(day, hour, minute)]
                text = ",".join(
                    p.session.code + (f"-{p.session.section}" if p.session.section else "")
                    for p in blocks
                )
                cells.append(text[:width].ljust(width))
            rows.append(f"{label} | " + " | ".join(cells))
    return "\n".join(rows)
