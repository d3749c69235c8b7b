from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "Student"
COURSE_STATUSES = ("ongoing", "completed", "upcoming")
MESSAGE_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Profile:
    name: str = ""
    student_id: str = ""
    email: str = ""
    phone: str = ""
    course: str = ""
    semester: str = ""

    @classmethod
    def from_dict(cls, row: Mapping[str, Any] | None) -> "Profile":
        if not row:
            return cls()
        return cls(
            name=_text(row, "name"),
            student_id=_text(row, "id", "student_id", "studentId"),
            email=_text(row, "email"),
            phone=_text(row, "phone"),
            course=_text(row, "course"),
            semester=_text(row, "semester"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Grades:
    assignment_quiz: float | None = None
    mid_semester: float | None = None
    comprehensive: float | None = None
    total: float | None = None
    final_grade: str | None = None

    @classmethod
    def from_dict(cls, row: Mapping[str, Any] | None) -> "Grades":
        if not row:
            return cls()
        final_grade = _text(row, "final_grade", "finalGrade") or None
        return cls(
            assignment_quiz=_number(row, "assignment_quiz", "assignmentQuiz"),
            mid_semester=_number(row, "mid_semester", "midSemester"),
            comprehensive=_number(row, "comprehensive"),
            total=_number(row, "total"),
            final_grade=final_grade,
        )

    @property
    def has_final_grade(self) -> bool:
        return bool(self.final_grade) and self.final_grade != "N/A"


@dataclass(frozen=True)
class Course:
    course_id: str
    title: str
    code: str = ""
    semester: int = 0
    status: str = "upcoming"
    progress: int = 0
    grades: Grades = field(default_factory=Grades)

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Course":
        status = _text(row, "status").lower() or "upcoming"
        if status not in COURSE_STATUSES:
            logger.warning("Unknown course status %r for %r, treating as upcoming", status, row.get("title"))
            status = "upcoming"

        progress = _number(row, "progress") or 0
        return cls(
            course_id=_text(row, "id", "course_id", "courseId"),
            title=_text(row, "title"),
            code=_text(row, "code"),
            semester=int(_number(row, "semester") or 0),
            status=status,
            progress=int(min(max(progress, 0), 100)),
            grades=Grades.from_dict(row.get("grades")),
        )


@dataclass(frozen=True)
class Event:
    event_id: str
    title: str
    date: date | None = None
    time: str = ""
    event_type: str = ""
    description: str = ""
    course: str = ""
    location: str = ""

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Event":
        return cls(
            event_id=_text(row, "id", "event_id", "eventId"),
            title=_text(row, "title"),
            date=parse_event_date(row.get("date")),
            time=_text(row, "time"),
            event_type=_text(row, "type", "event_type").lower(),
            description=_text(row, "description"),
            course=_text(row, "course"),
            location=_text(row, "location"),
        )


@dataclass(frozen=True)
class Announcement:
    announcement_id: str
    title: str
    content: str = ""
    time: str = ""
    priority: str = "medium"
    category: str = ""
    read: bool = False

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Announcement":
        return cls(
            announcement_id=_text(row, "id", "announcement_id"),
            title=_text(row, "title"),
            content=_text(row, "content"),
            time=_text(row, "time"),
            priority=_text(row, "priority").lower() or "medium",
            category=_text(row, "category"),
            read=bool(row.get("read", False)),
        )


@dataclass(frozen=True)
class NoteFile:
    file_id: str
    name: str
    mime_type: str = ""
    size: int = 0
    url: str = ""
    upload_date: str = ""

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "NoteFile":
        return cls(
            file_id=_text(row, "id", "file_id"),
            name=_text(row, "name"),
            mime_type=_text(row, "type", "mime_type"),
            size=int(_number(row, "size") or 0),
            url=_text(row, "url"),
            upload_date=_text(row, "uploadDate", "upload_date"),
        )


@dataclass(frozen=True)
class Note:
    note_id: str
    title: str
    content: str = ""
    course: str = ""
    tags: str = ""
    favorite: bool = False
    created_at: str = ""
    last_modified: str = ""
    files: tuple[NoteFile, ...] = ()

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Note":
        tags = row.get("tags") or ""
        if isinstance(tags, (list, tuple)):
            tags = ", ".join(str(tag) for tag in tags)
        raw_files = row.get("files") or row.get("attachments") or []
        return cls(
            note_id=_text(row, "id", "note_id"),
            title=_text(row, "title"),
            content=_text(row, "content"),
            course=_text(row, "course"),
            tags=str(tags),
            favorite=bool(row.get("favorite", False)),
            created_at=_text(row, "createdAt", "created_at"),
            last_modified=_text(row, "lastModified", "last_modified"),
            files=tuple(NoteFile.from_dict(item) for item in raw_files if isinstance(item, Mapping)),
        )


@dataclass(frozen=True)
class ContextSnapshot:
    """
    Read-only bundle of the student's portal data for one assistant turn.

    Build it with ``from_dict`` so defaults (empty collections, empty profile)
    are applied once at the boundary.
    """

    profile: Profile = field(default_factory=Profile)
    courses: tuple[Course, ...] = ()
    events: tuple[Event, ...] = ()
    announcements: tuple[Announcement, ...] = ()
    notes: tuple[Note, ...] = ()
    user_name: str = DEFAULT_USER_NAME

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "ContextSnapshot":
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ValueError("Context snapshot must be a JSON object")

        profile_row = payload.get("profile") or payload.get("userProfile")
        return cls(
            profile=Profile.from_dict(profile_row if isinstance(profile_row, Mapping) else None),
            courses=_records(payload, "courses", Course.from_dict),
            events=_records(payload, "events", Event.from_dict),
            announcements=_records(payload, "announcements", Announcement.from_dict),
            notes=_records(payload, "notes", Note.from_dict),
            user_name=_text(payload, "user_name", "userName") or DEFAULT_USER_NAME,
        )


@dataclass(frozen=True)
class ChatMessage:
    message_id: str
    role: str
    content: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_event_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.warning("Ignoring unparseable event date %r", value)
        return None


def _records(payload: Mapping[str, Any], key: str, factory) -> tuple:
    rows = payload.get(key) or []
    if not isinstance(rows, (list, tuple)):
        logger.warning("Expected a list for %r, got %s", key, type(rows).__name__)
        return ()
    return tuple(factory(row) for row in rows if isinstance(row, Mapping))


def _text(row: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None:
            return str(value).strip()
    return ""


def _number(row: Mapping[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = row.get(key)
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric %s=%r", key, value)
            return None
    return None
