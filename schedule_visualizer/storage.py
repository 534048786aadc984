"""
Local persistence: the working course list and named schedule snapshots,
kept as JSON values under two fixed keys of a single key/value file.

Snapshot export document:
    {"exportedAt": "...", "version": "1.0", "schedules": [Schedule, ...]}
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .models import CourseSession, Schedule, new_id, now_iso

logger = logging.getLogger(__name__)

COURSES_KEY = "scheduleVisualizerCourses"
SCHEDULES_KEY = "scheduleVisualizerSavedSchedules"
EXPORT_VERSION = "1.0"
STORE_ENV = "SCHEDULE_VISUALIZER_STORE"


def default_store_path() -> Path:
    env = os.environ.get(STORE_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".schedule_visualizer.json"


class JsonFileStore:
    """String keys -> JSON values, written through to one UTF-8 file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Store file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} must hold a JSON object.")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8"
        )


class WorkingSchedule:
    """The course list being edited; parsers never touch it directly."""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.courses: List[CourseSession] = [
            CourseSession.from_dict(c) for c in store.get(COURSES_KEY) or []
        ]

    def save(self) -> None:
        self.store.set(COURSES_KEY, [c.to_dict() for c in self.courses])

    def add(self, sessions: Iterable[CourseSession]) -> int:
        sessions = list(sessions)
        self.courses.extend(sessions)
        self.save()
        return len(sessions)

    def replace(self, sessions: Iterable[CourseSession]) -> None:
        self.courses = list(sessions)
        self.save()

    def remove(self, index: int) -> CourseSession:
        if not 0 <= index < len(self.courses):
            raise ValueError(f"No course at position {index}.")
        removed = self.courses.pop(index)
        self.save()
        return removed

    def clear(self) -> None:
        self.replace([])


class ScheduleLibrary:
    """Named snapshots of course lists, newest first."""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.schedules: List[Schedule] = [
            Schedule.from_dict(s) for s in store.get(SCHEDULES_KEY) or []
        ]

    def _persist(self) -> None:
        self.store.set(SCHEDULES_KEY, [s.to_dict() for s in self.schedules])

    def find_by_name(self, name: str) -> Optional[Schedule]:
        lowered = name.lower()
        return next((s for s in self.schedules if s.name.lower() == lowered), None)

    def get(self, schedule_id: str) -> Optional[Schedule]:
        return next((s for s in self.schedules if str(s.id) == str(schedule_id)), None)

    def save(self, name: str, courses: Iterable[CourseSession], replace: bool = False) -> Schedule:
        name = (name or "").strip()
        if not name:
            raise ValueError("Please enter a name for your schedule.")
        courses = list(courses)
        if not courses:
            raise ValueError("No courses to save.")

        existing = self.find_by_name(name)
        if existing is not None:
            if not replace:
                raise ValueError(f'A schedule named "{name}" already exists.')
            self.schedules.remove(existing)

        schedule = Schedule(name=name, courses=courses)
        self.schedules.insert(0, schedule)
        self._persist()
        return schedule

    def delete(self, schedule_id: str) -> Schedule:
        schedule = self.get(schedule_id)
        if schedule is None:
            raise ValueError(f"Schedule not found: {schedule_id}")
        self.schedules.remove(schedule)
        self._persist()
        return schedule

    def export_document(self) -> Dict:
        return {
            "exportedAt": now_iso(),
            "version": EXPORT_VERSION,
            "schedules": [s.to_dict() for s in self.schedules],
        }

    def import_document(self, data: Any) -> List[Schedule]:
        """
        Add the schedules of an export document. Entries without a name or
        course list are skipped; clashing names get " (imported)" appended
        and every imported schedule gets a fresh id.
        """
        if not isinstance(data, dict) or not isinstance(data.get("schedules"), list):
            raise ValueError("Invalid file format")

        candidates: List[Schedule] = []
        for raw in data["schedules"]:
            if not (isinstance(raw, dict) and raw.get("name") and isinstance(raw.get("courses"), list)):
                continue
            try:
                candidates.append(Schedule.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping schedule %r: %s", raw.get("name"), e)
        if not candidates:
            raise ValueError("No valid schedules found in file")

        names = [s.name for s in self.schedules]
        imported: List[Schedule] = []
        for schedule in candidates:
            schedule.id = new_id()
            schedule.imported_at = now_iso()
            if schedule.name in names:
                schedule.name = f"{schedule.name} (imported)"
            names.append(schedule.name)
            self.schedules.append(schedule)
            imported.append(schedule)

        skipped = len(data["schedules"]) - len(candidates)
        if skipped:
            logger.info("Skipped %d schedule entr(y/ies) without name or courses", skipped)
        self._persist()
        return imported

    def export_file(self, path: str | Path) -> int:
        if not self.schedules:
            raise ValueError("No schedules to export")
        try:
            Path(path).write_text(
                json.dumps(self.export_document(), indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as e:
            raise ValueError(f"Cannot write {path}: {e.strerror or e}") from e
        return len(self.schedules)

    def import_file(self, path: str | Path) -> List[Schedule]:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ValueError(f"Cannot read {path}: {e.strerror or e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Error reading {path}. Make sure it's a valid JSON export.") from e
        return self.import_document(data)
