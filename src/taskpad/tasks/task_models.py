# src/taskpad/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from enum import StrEnum
from typing import Any


class TaskDecodeError(ValueError):
    """A stored task record (or the collection holding it) is malformed."""


class Category(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    EDUCATION = "education"

    @classmethod
    def parse(cls, raw: Any) -> Category | str:
        """
        Known categories become enum members; any other non-empty string is kept
        as-is (storage is open-ended, only the UI restricts the choice).
        """
        if raw is None or raw == "":
            return cls.WORK
        if not isinstance(raw, str):
            raise TaskDecodeError(f"category must be a string, got {type(raw).__name__}")
        try:
            return cls(raw)
        except ValueError:
            return raw


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> Priority | str:
        """Like Category.parse: a level written by another client is kept, not dropped."""
        if raw is None or raw == "":
            return cls.MEDIUM
        if not isinstance(raw, str):
            raise TaskDecodeError(f"priority must be a string, got {type(raw).__name__}")
        try:
            return cls(raw)
        except ValueError:
            return raw

    @property
    def weight(self) -> int:
        return {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}[self]


def priority_weight(priority: Priority | str) -> int:
    """Sort weight; levels outside high/medium/low rank below low."""
    return priority.weight if isinstance(priority, Priority) else 0


DEFAULT_REMINDER_MINUTES = 10


def iso_now(now: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(raw: Any, *, tz: tzinfo | None = None) -> datetime | None:
    """
    Parse an ISO-8601 string into an aware datetime.

    Naive values are interpreted in `tz` (system local time when None).
    Returns None for anything that is not a parseable string.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, str) and raw.strip():
        try:
            dt = datetime.fromisoformat(raw.strip())
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz) if tz is not None else dt.astimezone()
    return dt


@dataclass(slots=True, frozen=True)
class Reminder:
    enabled: bool = True
    minutes: int = DEFAULT_REMINDER_MINUTES
    reminder_time: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "minutes": self.minutes,
            "reminderTime": self.reminder_time,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Reminder:
        if data is None:
            return cls()
        if isinstance(data, Reminder):
            return data
        if not isinstance(data, dict):
            raise TaskDecodeError(f"reminder must be an object, got {type(data).__name__}")

        enabled = data.get("enabled", True)
        if not isinstance(enabled, bool):
            raise TaskDecodeError("reminder.enabled must be a boolean")

        minutes = data.get("minutes")
        if minutes is None or minutes == 0:
            minutes = DEFAULT_REMINDER_MINUTES
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 0:
            raise TaskDecodeError(f"reminder.minutes must be a non-negative integer, got {minutes!r}")

        reminder_time = data.get("reminderTime")
        if reminder_time is not None and parse_iso(reminder_time) is None:
            raise TaskDecodeError(f"reminder.reminderTime is not ISO-8601: {reminder_time!r}")

        return cls(enabled=enabled, minutes=minutes, reminder_time=reminder_time)


# Python attribute name -> stored JSON key.
FIELD_KEYS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "category": "category",
    "priority": "priority",
    "date": "date",
    "time": "time",
    "reminder": "reminder",
    "completed": "completed",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "tags": "tags",
    "attachments": "attachments",
    "notes": "notes",
}

# Fields only the store may assign.
STORE_ASSIGNED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _str_field(data: dict[str, Any], key: str, default: str = "") -> str:
    val = data.get(key)
    if val is None:
        return default
    if not isinstance(val, str):
        raise TaskDecodeError(f"{key} must be a string, got {type(val).__name__}")
    return val


@dataclass(slots=True)
class Task:
    id: str
    title: str
    date: str
    time: str
    created_at: str
    updated_at: str

    description: str = ""
    category: Category | str = Category.WORK
    priority: Priority | str = Priority.MEDIUM
    reminder: Reminder = field(default_factory=Reminder)
    completed: bool = False

    tags: list[str] = field(default_factory=list)
    attachments: list[Any] = field(default_factory=list)
    notes: str = ""

    @property
    def pending(self) -> bool:
        return not self.completed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": str(self.category),
            "priority": str(self.priority),
            "date": self.date,
            "time": self.time,
            "reminder": self.reminder.to_dict(),
            "completed": self.completed,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "tags": list(self.tags),
            "attachments": list(self.attachments),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Task:
        """
        Decode one stored record, rejecting shapes the queries cannot rely on.

        `date` is kept verbatim even when it does not parse; date-based queries
        skip such tasks, everything else still sees them.
        """
        if not isinstance(data, dict):
            raise TaskDecodeError(f"task record must be an object, got {type(data).__name__}")

        task_id = data.get("id")
        if isinstance(task_id, int) and not isinstance(task_id, bool):
            task_id = str(task_id)
        if not isinstance(task_id, str) or not task_id:
            raise TaskDecodeError("task record has no id")

        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise TaskDecodeError("completed must be a boolean")

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise TaskDecodeError("tags must be a list of strings")

        attachments = data.get("attachments") or []
        if not isinstance(attachments, list):
            raise TaskDecodeError("attachments must be a list")

        reminder = Reminder.from_dict(data.get("reminder"))

        return cls(
            id=task_id,
            title=_str_field(data, "title"),
            description=_str_field(data, "description"),
            category=Category.parse(data.get("category")),
            priority=Priority.parse(data.get("priority")),
            date=_str_field(data, "date"),
            time=_str_field(data, "time"),
            reminder=reminder,
            completed=completed,
            created_at=_str_field(data, "createdAt"),
            updated_at=_str_field(data, "updatedAt"),
            tags=list(tags),
            attachments=list(attachments),
            notes=_str_field(data, "notes"),
        )


def to_storage_value(value: Any) -> Any:
    """Convert a caller-supplied field value to its stored JSON form."""
    if isinstance(value, Reminder):
        return value.to_dict()
    if isinstance(value, StrEnum):
        return value.value
    if isinstance(value, datetime):
        return iso_now(value) if value.tzinfo is not None else value.isoformat()
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return value


@dataclass(slots=True, frozen=True)
class TaskResult:
    """Outcome of a mutation: never raised, always returned."""

    success: bool
    task: Task | None = None
    error: str | None = None

    @classmethod
    def ok(cls, task: Task | None = None) -> TaskResult:
        return cls(success=True, task=task)

    @classmethod
    def fail(cls, error: str) -> TaskResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.task is not None:
            out["task"] = self.task.to_dict()
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    overdue: int
    today: int
    priority_breakdown: dict[str, int]
    category_breakdown: dict[str, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "pending": self.pending,
            "overdue": self.overdue,
            "today": self.today,
            "priorityBreakdown": dict(self.priority_breakdown),
            "categoryBreakdown": dict(self.category_breakdown),
        }
