"""
Record types shared by the parser, the grid and the storage layer.

Serialized form keeps the camelCase keys used by the saved schedule files:
    {"id", "code", "section", "title", "days", "startTime", "endTime",
     "room", "isTBA"}
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List, Tuple

DAY_CODES = ("M", "T", "W", "TH", "F", "S", "SU")
TBA = "TBA"

DAY_NAMES = {
    "M": "Monday",
    "T": "Tuesday",
    "W": "Wednesday",
    "TH": "Thursday",
    "F": "Friday",
    "S": "Saturday",
    "SU": "Sunday",
}


def new_id() -> str:
    return uuid.uuid4().hex


def _dedupe(days) -> Tuple[str, ...]:
    out: List[str] = []
    for d in days:
        if d not in out:
            out.append(d)
    return tuple(out)


@dataclass(frozen=True)
class CourseSession:
    """One weekly meeting of a course (code + section + day(s) + time range)."""

    code: str
    section: str = ""
    title: str = ""
    days: Tuple[str, ...] = ()
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    is_tba: bool = False
    id: str = field(default_factory=new_id, compare=False)

    def __post_init__(self):
        if not self.code:
            raise ValueError("Course code is required.")
        if bool(self.start_time) != bool(self.end_time):
            raise ValueError(
                f"{self.code}: start and end time must both be set or both be empty "
                f"(got {self.start_time!r} / {self.end_time!r})."
            )
        object.__setattr__(self, "days", _dedupe(self.days))

    @property
    def has_time(self) -> bool:
        return bool(self.start_time and self.end_time)

    def with_id(self, session_id: str | None = None) -> "CourseSession":
        return replace(self, id=session_id or new_id())

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "code": self.code,
            "section": self.section,
            "title": self.title,
            "days": list(self.days),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "room": self.room,
            "isTBA": self.is_tba,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CourseSession":
        """Build a session from its stored form; optional keys may be missing."""
        kwargs = dict(
            code=str(data.get("code") or "").strip(),
            section=data.get("section") or "",
            title=data.get("title") or "",
            days=tuple(data.get("days") or ()),
            start_time=data.get("startTime") or "",
            end_time=data.get("endTime") or "",
            room=data.get("room") or "",
            is_tba=bool(data.get("isTBA", False)),
        )
        if data.get("id") is not None:
            kwargs["id"] = str(data["id"])
        return cls(**kwargs)


def unique_course_count(courses: List[CourseSession]) -> int:
    return len({c.code for c in courses})


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class Schedule:
    """A named snapshot of a full course list."""

    name: str
    courses: List[CourseSession]
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=now_iso)
    imported_at: str = ""

    @property
    def course_count(self) -> int:
        return len(self.courses)

    @property
    def unique_courses(self) -> int:
        return unique_course_count(self.courses)

    def to_dict(self) -> Dict:
        data = {
            "id": self.id,
            "name": self.name,
            "courses": [c.to_dict() for c in self.courses],
            "createdAt": self.created_at,
            "courseCount": self.course_count,
            "uniqueCourses": self.unique_courses,
        }
        if self.imported_at:
            data["importedAt"] = self.imported_at
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Schedule":
        return cls(
            name=str(data["name"]),
            courses=[CourseSession.from_dict(c) for c in data["courses"]],
            id=str(data.get("id") or new_id()),
            created_at=data.get("createdAt") or now_iso(),
            imported_at=data.get("importedAt") or "",
        )
