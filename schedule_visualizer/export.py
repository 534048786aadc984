"""
Export a course list to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import List

import icalendar
import pytz

from .models import CourseSession

DEFAULT_TIMEZONE = "Asia/Manila"

_WEEKDAY_INDEX = {"M": 0, "T": 1, "W": 2, "TH": 3, "F": 4, "S": 5, "SU": 6}

CSV_FIELDS = ["code", "section", "title", "days", "startTime", "endTime", "room", "isTBA"]


def _first_date_for_weekday(start: date, day_code: str) -> date:
    """First date on/after start that falls on the given day code."""
    target_idx = _WEEKDAY_INDEX.get(day_code)
    if target_idx is None:
        return start
    offset = (target_idx - start.weekday()) % 7
    return start + timedelta(days=offset)


def _parse_time(day: date, time_str: str) -> datetime:
    """Combine a date and an 'HH:MM' time."""
    if not time_str:
        raise ValueError("Missing time")
    return datetime.strptime(f"{day.isoformat()} {time_str.strip()}", "%Y-%m-%d %H:%M")


def _summary(course: CourseSession) -> str:
    return f"{course.code}-{course.section}" if course.section else course.code


def export_ics(
    courses: List[CourseSession],
    out_path: str | Path,
    term_start: str | None = None,
    term_end: str | None = None,
    tz_name: str = DEFAULT_TIMEZONE,
) -> int:
    """
    Export to iCalendar: one weekly event per (session, day) from the first
    matching weekday on/after term_start until term_end. TBA and untimed
    sessions are left out. Returns the number of events written.
    """
    if not term_start or not term_end:
        raise ValueError("ICS export needs --term-start and --term-end (YYYY-MM-DD).")
    start_day = date.fromisoformat(term_start)
    end_day = date.fromisoformat(term_end)
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown timezone: {tz_name}") from e

    cal = icalendar.Calendar()
    cal.add("prodid", "-//Schedule Visualizer//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Class Schedule")
    cal.add("x-wr-timezone", tz_name)

    count = 0
    for c in courses:
        if c.is_tba or not c.has_time:
            continue
        for day_code in c.days:
            if day_code not in _WEEKDAY_INDEX:
                continue
            first = _first_date_for_weekday(start_day, day_code)
            try:
                start = _parse_time(first, c.start_time)
                end = _parse_time(first, c.end_time)
            except ValueError:
                continue

            summary = _summary(c)
            event = icalendar.Event()
            uid_string = f"{summary}-{day_code}-{start.isoformat()}"
            uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
            event.add("uid", f"{uid_hash}@schedule-visualizer")
            event.add("summary", summary)
            if c.title:
                event.add("description", c.title)
            if c.room:
                event.add("location", c.room)
            event.add("dtstart", tz.localize(start))
            event.add("dtend", tz.localize(end))
            event.add("dtstamp", datetime.now(timezone.utc))
            until_dt = datetime(
                end_day.year, end_day.month, end_day.day, 23, 59, 59, tzinfo=timezone.utc
            )
            event.add("rrule", {"freq": "weekly", "until": until_dt})
            cal.add_component(event)
            count += 1

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")
    return count


def export_csv(courses: List[CourseSession], out_path: str | Path) -> int:
    """Export to CSV, days joined with spaces."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        for c in courses:
            row = c.to_dict()
            row["days"] = " ".join(c.days)
            w.writerow(row)
    return len(courses)


def export_json(courses: List[CourseSession], out_path: str | Path) -> int:
    """Export to JSON in the stored course shape."""
    Path(out_path).write_text(
        json.dumps([c.to_dict() for c in courses], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return len(courses)


def export(courses: List[CourseSession], out_path: str | Path, fmt: str, **ics_options) -> int:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        return export_ics(courses, out_path, **ics_options)
    if fmt == "csv":
        return export_csv(courses, out_path)
    if fmt == "json":
        return export_json(courses, out_path)
    raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
