"""Tests for storage.py – working list, saved schedules, export/import."""
import json

import pytest

from schedule_visualizer.models import CourseSession
from schedule_visualizer.storage import (
    COURSES_KEY,
    SCHEDULES_KEY,
    STORE_ENV,
    JsonFileStore,
    ScheduleLibrary,
    WorkingSchedule,
    default_store_path,
)


def _courses():
    return [
        CourseSession(code="IT101", section="G1", days=("M",), start_time="08:00", end_time="10:00", room="NGE101"),
        CourseSession(code="IT101", section="G1", days=("W",), start_time="08:00", end_time="10:00", room="NGE101"),
        CourseSession(code="PE101", is_tba=True),
    ]


def _signature(schedules):
    return sorted(
        (s.name, tuple(sorted((c.code, c.section, c.days, c.start_time, c.end_time, c.room, c.is_tba)
                              for c in s.courses)))
        for s in schedules
    )


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(tmp_path / "store.json")


# ── Store ──────────────────────────────────────────────────────

class TestJsonFileStore:
    def test_missing_file_is_empty(self, store):
        assert store.get(COURSES_KEY) is None
        assert store.get(COURSES_KEY, []) == []

    def test_write_through(self, store):
        store.set("k", {"a": 1})
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"k": {"a": 1}}
        assert JsonFileStore(store.path).get("k") == {"a": 1}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            JsonFileStore(path)

    def test_default_path_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv(STORE_ENV, str(tmp_path / "x.json"))
        assert default_store_path() == tmp_path / "x.json"


# ── Working list ───────────────────────────────────────────────

class TestWorkingSchedule:
    def test_add_persists(self, store):
        working = WorkingSchedule(store)
        assert working.add(_courses()) == 3
        reloaded = WorkingSchedule(JsonFileStore(store.path))
        assert reloaded.courses == working.courses
        assert [c.id for c in reloaded.courses] == [c.id for c in working.courses]

    def test_add_appends(self, store):
        working = WorkingSchedule(store)
        working.add(_courses()[:1])
        working.add(_courses()[2:])
        assert [c.code for c in working.courses] == ["IT101", "PE101"]

    def test_remove_and_clear(self, store):
        working = WorkingSchedule(store)
        working.replace(_courses())
        removed = working.remove(2)
        assert removed.code == "PE101"
        assert len(working.courses) == 2
        with pytest.raises(ValueError):
            working.remove(5)
        working.clear()
        assert store.get(COURSES_KEY) == []


# ── Saved schedules ────────────────────────────────────────────

class TestScheduleLibrary:
    def test_save_newest_first(self, store):
        library = ScheduleLibrary(store)
        library.save("Sem 1", _courses())
        library.save("Sem 2", _courses()[:1])
        assert [s.name for s in library.schedules] == ["Sem 2", "Sem 1"]
        saved = store.get(SCHEDULES_KEY)
        assert saved[0]["courseCount"] == 1
        assert saved[1]["uniqueCourses"] == 2

    def test_save_rejects_bad_input(self, store):
        library = ScheduleLibrary(store)
        with pytest.raises(ValueError):
            library.save("  ", _courses())
        with pytest.raises(ValueError):
            library.save("Sem 1", [])

    def test_duplicate_name(self, store):
        library = ScheduleLibrary(store)
        library.save("Sem 1", _courses())
        with pytest.raises(ValueError):
            library.save("SEM 1", _courses()[:1])
        library.save("SEM 1", _courses()[:1], replace=True)
        assert [s.name for s in library.schedules] == ["SEM 1"]
        assert library.schedules[0].course_count == 1

    def test_get_and_delete(self, store):
        library = ScheduleLibrary(store)
        schedule = library.save("Sem 1", _courses())
        assert library.get(schedule.id) is schedule
        library.delete(schedule.id)
        assert library.schedules == []
        with pytest.raises(ValueError):
            library.delete(schedule.id)


# ── Export / import ────────────────────────────────────────────

class TestExportImport:
    def test_round_trip_into_empty_store(self, store, tmp_path):
        library = ScheduleLibrary(store)
        library.save("Sem 1", _courses())
        library.save("Sem 2", _courses()[1:])
        out = tmp_path / "export.json"
        assert library.export_file(out) == 2

        document = json.loads(out.read_text(encoding="utf-8"))
        assert document["version"] == "1.0"
        assert document["exportedAt"]

        other = ScheduleLibrary(JsonFileStore(tmp_path / "other.json"))
        imported = other.import_file(out)
        assert len(imported) == 2
        assert _signature(other.schedules) == _signature(library.schedules)
        assert {s.id for s in other.schedules}.isdisjoint({s.id for s in library.schedules})
        assert all(s.imported_at for s in imported)

    def test_name_collision(self, store):
        library = ScheduleLibrary(store)
        library.save("Sem 1", _courses())
        document = library.export_document()
        library.import_document(document)
        assert sorted(s.name for s in library.schedules) == ["Sem 1", "Sem 1 (imported)"]

    def test_invalid_format(self, store):
        library = ScheduleLibrary(store)
        with pytest.raises(ValueError, match="Invalid file format"):
            library.import_document({"foo": 1})
        with pytest.raises(ValueError, match="Invalid file format"):
            library.import_document([])

    def test_bad_entries_filtered(self, store):
        library = ScheduleLibrary(store)
        document = {
            "version": "1.0",
            "schedules": [
                {"name": "", "courses": []},
                {"name": "No courses"},
                {"name": "Broken", "courses": [{"code": ""}]},
                {"name": "Good", "courses": [{"code": "CS101", "isTBA": True}]},
            ],
        }
        imported = library.import_document(document)
        assert [s.name for s in imported] == ["Good"]

    def test_nothing_valid(self, store):
        library = ScheduleLibrary(store)
        with pytest.raises(ValueError, match="No valid schedules"):
            library.import_document({"schedules": [{"name": "x"}]})

    def test_export_empty(self, store, tmp_path):
        with pytest.raises(ValueError, match="No schedules to export"):
            ScheduleLibrary(store).export_file(tmp_path / "e.json")

    def test_import_missing_file(self, store, tmp_path):
        with pytest.raises(ValueError, match="Cannot read"):
            ScheduleLibrary(store).import_file(tmp_path / "missing.json")

    def test_import_not_json(self, store, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("nope", encoding="utf-8")
        with pytest.raises(ValueError):
            ScheduleLibrary(store).import_file(path)
