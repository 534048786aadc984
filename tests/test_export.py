import csv
import json

import pytest

from schedule_visualizer.export import export, export_csv, export_ics, export_json
from schedule_visualizer.models import CourseSession


def _courses():
    return [
        CourseSession(
            code="IT332",
            section="G1",
            title="Web Development",
            days=("TH",),
            start_time="10:30",
            end_time="12:15",
            room="NGE207",
        ),
        CourseSession(code="PE101", title="Fitness", is_tba=True),
    ]


def test_export_ics(tmp_path):
    out_path = tmp_path / "test.ics"

    count = export_ics(_courses(), out_path, term_start="2026-01-05", term_end="2026-04-18")

    assert count == 1
    assert out_path.exists()
    content = out_path.read_text(encoding="utf-8")

    # Verify standard ICS elements
    assert "BEGIN:VCALENDAR" in content
    assert "BEGIN:VEVENT" in content
    assert "END:VEVENT" in content
    assert "END:VCALENDAR" in content

    # 2026-01-05 is a Monday, so the first Thursday is 2026-01-08
    assert "DTSTART;TZID=Asia/Manila:20260108T103000" in content
    assert "DTEND;TZID=Asia/Manila:20260108T121500" in content

    # Verify UID is present
    assert "UID:" in content
    assert "@schedule-visualizer" in content
    assert "SUMMARY:IT332-G1" in content

    # Verify RRULE
    assert "UNTIL=20260418T235959Z" in content
    assert "FREQ=WEEKLY" in content

    # TBA sessions are not calendar events
    assert "PE101" not in content


def test_export_ics_one_event_per_day(tmp_path):
    courses = [CourseSession(code="IT101", days=("M", "W"), start_time="08:00", end_time="09:00")]
    out_path = tmp_path / "test.ics"
    assert export_ics(courses, out_path, term_start="2026-01-05", term_end="2026-04-18") == 2
    content = out_path.read_text(encoding="utf-8")
    assert "DTSTART;TZID=Asia/Manila:20260105T080000" in content
    assert "DTSTART;TZID=Asia/Manila:20260107T080000" in content


def test_export_ics_needs_term(tmp_path):
    with pytest.raises(ValueError):
        export_ics(_courses(), tmp_path / "test.ics")


def test_export_csv(tmp_path):
    out_path = tmp_path / "test.csv"
    assert export_csv(_courses(), out_path) == 2
    with open(out_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["code"] == "IT332"
    assert rows[0]["days"] == "TH"
    assert rows[0]["startTime"] == "10:30"
    assert rows[1]["isTBA"] == "True"
    assert "id" not in rows[0]


def test_export_json(tmp_path):
    out_path = tmp_path / "test.json"
    assert export_json(_courses(), out_path) == 2
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data[0]["days"] == ["TH"]
    assert data[1]["isTBA"] is True


def test_export_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        export(_courses(), tmp_path / "x.txt", "txt")
