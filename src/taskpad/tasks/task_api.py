# src/taskpad/tasks/task_api.py

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, time, timedelta, tzinfo
from enum import StrEnum
from typing import Any

from ..core.ports import TaskRepo
from .task_models import (
    Reminder,
    Task,
    TaskDecodeError,
    TaskResult,
    iso_now,
    parse_iso,
    priority_weight,
)

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?")
_OLDEST = datetime.min.replace(tzinfo=UTC)


class SortKey(StrEnum):
    CREATED = "created"  # newest first
    DUE = "due"  # latest due date first
    PRIORITY = "priority"  # high -> low
    CATEGORY = "category"  # alphabetical
    STATUS = "status"  # pending before completed


class StatusFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


def is_valid_task(fields: Mapping[str, Any]) -> bool:
    title = fields.get("title")
    return isinstance(title, str) and bool(title.strip())


def validate_task_input(fields: Mapping[str, Any]) -> str | None:
    """Return a user-facing problem description, or None when the input is acceptable."""
    if not is_valid_task(fields):
        return "Please enter a title for your task"
    return None


def _time_of_day(raw: Any, *, tz: tzinfo | None) -> time | None:
    if isinstance(raw, datetime):
        local = raw.astimezone(tz) if tz is not None else raw.astimezone()
        return local.time()
    if isinstance(raw, time):
        return raw
    if not isinstance(raw, str):
        return None

    m = _CLOCK_RE.match(raw)
    if m:
        hh, mm = int(m.group(1)), int(m.group(2))
        if hh < 24 and mm < 60:
            return time(hh, mm)
        return None

    dt = parse_iso(raw, tz=tz)
    if dt is None:
        return None
    local = dt.astimezone(tz) if tz is not None else dt.astimezone()
    return local.time()


def compute_reminder_time(
    due_date: Any,
    due_time: Any,
    minutes: int,
    *,
    tz: tzinfo | None = None,
) -> str | None:
    """
    Due moment minus the lead time, as a UTC ISO-8601 string.

    The due moment is the calendar day of `due_date` combined with the hour and
    minute of `due_time` (seconds dropped). Returns None when either part cannot
    be interpreted.
    """
    day = parse_iso(due_date, tz=tz)
    clock = _time_of_day(due_time, tz=tz)
    if day is None or clock is None:
        return None

    local_day = day.astimezone(tz) if tz is not None else day.astimezone()
    due = local_day.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
    return iso_now(due - timedelta(minutes=max(0, int(minutes))))


async def add_task(store: TaskRepo, *, tz: tzinfo | None = None, **fields: Any) -> TaskResult:
    """
    Caller-side entry point for new tasks.

    Validates the input the way the add-task form does and fills in
    reminderTime for enabled reminders before handing off to the store.
    A missing date is the store's current instant, read from the store's clock
    so reminderTime and the stamped date agree. `tz` defaults to the store's zone.
    """
    problem = validate_task_input(fields)
    if problem:
        return TaskResult.fail(problem)

    try:
        reminder = Reminder.from_dict(fields.get("reminder"))
    except TaskDecodeError as e:
        return TaskResult.fail(str(e))
    if reminder.enabled and reminder.reminder_time is None:
        if tz is None:
            tz = store.tz
        due_date = fields.get("date") or store.now()
        due_time = fields.get("time") or due_date
        reminder = Reminder(
            enabled=True,
            minutes=reminder.minutes,
            reminder_time=compute_reminder_time(due_date, due_time, reminder.minutes, tz=tz),
        )
    fields["reminder"] = reminder

    result = await store.create(**fields)
    if not result.success:
        logger.info("add_task failed: %s", result.error)
    return result


def filter_tasks(
    tasks: Iterable[Task],
    *,
    query: str | None = None,
    status: StatusFilter | str = StatusFilter.ALL,
    category: str | None = None,
    priority: str | None = None,
) -> list[Task]:
    """List-view filtering: text query on title/description, then status, category, priority."""
    out = list(tasks)

    needle = (query or "").strip().lower()
    if needle:
        out = [t for t in out if needle in t.title.lower() or needle in t.description.lower()]

    status = StatusFilter(status)
    if status is StatusFilter.PENDING:
        out = [t for t in out if t.pending]
    elif status is StatusFilter.COMPLETED:
        out = [t for t in out if t.completed]

    if category and category != "all":
        out = [t for t in out if str(t.category) == category]
    if priority and priority != "all":
        out = [t for t in out if str(t.priority) == priority]
    return out


def sort_tasks(tasks: Iterable[Task], by: SortKey | str = SortKey.CREATED) -> list[Task]:
    """Stable sort for list views. Unparseable dates sort last."""
    items = list(tasks)
    key = SortKey(by)

    if key is SortKey.CREATED:
        return sorted(items, key=lambda t: parse_iso(t.created_at) or _OLDEST, reverse=True)
    if key is SortKey.DUE:
        return sorted(items, key=lambda t: parse_iso(t.date) or _OLDEST, reverse=True)
    if key is SortKey.PRIORITY:
        return sorted(items, key=lambda t: priority_weight(t.priority), reverse=True)
    if key is SortKey.CATEGORY:
        return sorted(items, key=lambda t: str(t.category))
    return sorted(items, key=lambda t: t.completed)
