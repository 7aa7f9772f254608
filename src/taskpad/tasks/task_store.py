# src/taskpad/tasks/task_store.py

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta, tzinfo
from typing import Any, TypeVar

from ..core.ports import Clock, KeyValueStorage
from .task_models import (
    FIELD_KEYS,
    STORE_ASSIGNED_FIELDS,
    Priority,
    Task,
    TaskDecodeError,
    TaskResult,
    TaskStats,
    iso_now,
    parse_iso,
    to_storage_value,
)

logger = logging.getLogger(__name__)

TASKS_KEY = "@tasks"
DEFAULT_UPCOMING_DAYS = 7
_PRIORITY_VALUES = tuple(p.value for p in Priority)

R = TypeVar("R")

Mutator = Callable[[list[Task]], tuple[list[Task] | None, R]]
# Receives the freshly loaded collection; returns (collection to persist or None, result).


def _utc_now() -> datetime:
    return datetime.now(UTC)


class TaskStore:
    """
    Task collection kept as one JSON array under one storage key.

    Every operation loads the whole collection, works on it in memory and, for
    mutations, writes the whole collection back. Nothing is cached between calls.

    Error policy:
    - reads degrade to [] / None
    - mutations return TaskResult(success=False, error=...)
    - nothing raises to the caller; failures are logged

    Concurrency:
    - without serialize_writes, two overlapping mutations each load their own
      copy and the later write wins on the whole collection
    - with serialize_writes, transactions on this instance run one at a time
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = TASKS_KEY,
        clock: Clock | None = None,
        tz: tzinfo | None = None,
        serialize_writes: bool = False,
        upcoming_days: int = DEFAULT_UPCOMING_DAYS,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or _utc_now
        self._tz = tz
        self._upcoming_days = upcoming_days
        self._lock: asyncio.Lock | None = asyncio.Lock() if serialize_writes else None
        logger.info("TaskStore ready key=%s serialize_writes=%s", key, serialize_writes)

    @property
    def key(self) -> str:
        return self._key

    @property
    def tz(self) -> tzinfo | None:
        """Zone used for calendar days; None means system local time."""
        return self._tz

    def now(self) -> datetime:
        """Current instant from the injected clock (the one stamping new tasks)."""
        return self._clock()

    # ---- low-level helpers ----

    def _local(self, dt: datetime) -> datetime:
        return dt.astimezone(self._tz) if self._tz is not None else dt.astimezone()

    def _day(self, dt: datetime) -> date:
        return self._local(dt).date()

    def _due(self, task: Task) -> datetime | None:
        return parse_iso(task.date, tz=self._tz)

    async def _load(self) -> list[Task]:
        raw = await self._storage.get(self._key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TaskDecodeError(f"stored task collection is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise TaskDecodeError(f"stored task collection must be an array, got {type(data).__name__}")

        tasks: list[Task] = []
        for item in data:
            try:
                tasks.append(Task.from_dict(item))
            except TaskDecodeError as e:
                label = item.get("id") if isinstance(item, dict) else None
                raise TaskDecodeError(f"task {label}: {e}") from None
        seen: set[str] = set()
        for t in tasks:
            if t.id in seen:
                raise TaskDecodeError(f"duplicate task id in stored collection: {t.id}")
            seen.add(t.id)
        return tasks

    async def _save(self, tasks: list[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        await self._storage.set(self._key, payload)

    async def _transact(self, mutator: Mutator[R]) -> R:
        tasks = await self._load()
        new_tasks, result = mutator(tasks)
        if new_tasks is not None:
            await self._save(new_tasks)
        return result

    async def with_collection(self, mutator: Mutator[R]) -> R:
        """
        Load -> mutate -> write, as one unit.

        `mutator` must be pure: it gets the loaded list and returns the list to
        persist (or None to skip the write) plus the value to hand back.
        Load, decode and write errors propagate; nothing is written when the
        load fails.
        """
        if self._lock is None:
            return await self._transact(mutator)
        async with self._lock:
            return await self._transact(mutator)

    @staticmethod
    def _new_id(now: datetime, tasks: Iterable[Task]) -> str:
        existing = {t.id for t in tasks}
        candidate = int(now.timestamp() * 1000)
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    @staticmethod
    def _check_fields(fields: dict[str, Any]) -> str | None:
        """Caller input is held to the strict shape; stored records are read leniently."""
        unknown = sorted(set(fields) - set(FIELD_KEYS))
        if unknown:
            return f"Unknown task field(s): {', '.join(unknown)}"
        assigned = sorted(set(fields) & STORE_ASSIGNED_FIELDS)
        if assigned:
            return f"Field(s) assigned by the store: {', '.join(assigned)}"
        if "title" in fields:
            title = fields["title"]
            if not isinstance(title, str) or not title.strip():
                return "Title is required"
        if "date" in fields and parse_iso(to_storage_value(fields["date"])) is None:
            return f"Invalid date: {fields['date']!r}"
        if "priority" in fields and fields["priority"] not in _PRIORITY_VALUES:
            return f"Invalid priority: {fields['priority']!r}"
        return None

    # ---- reads ----

    async def get_all(self) -> list[Task]:
        """All tasks in stored order; [] when the collection cannot be read."""
        try:
            return await self._load()
        except Exception:
            logger.exception("Failed to load tasks key=%s", self._key)
            return []

    async def get_by_id(self, task_id: str) -> Task | None:
        for t in await self.get_all():
            if t.id == task_id:
                return t
        return None

    # ---- mutations ----

    async def create(self, **fields: Any) -> TaskResult:
        if "title" not in fields:
            return TaskResult.fail("Title is required")
        # None and "" mean "use the default" on create.
        fields = {k: v for k, v in fields.items() if k == "title" or (v is not None and v != "")}
        problem = self._check_fields(fields)
        if problem:
            logger.warning("Task create rejected: %s", problem)
            return TaskResult.fail(problem)

        now = self.now()
        stamp = iso_now(now)
        record = {FIELD_KEYS[k]: to_storage_value(v) for k, v in fields.items()}
        record.setdefault("date", stamp)
        record.setdefault("time", self._local(now).strftime("%H:%M:%S"))
        record.update({"id": "pending", "createdAt": stamp, "updatedAt": stamp})

        try:
            candidate = Task.from_dict(record)
        except TaskDecodeError as e:
            logger.warning("Task create rejected: %s", e)
            return TaskResult.fail(str(e))

        def mutator(tasks: list[Task]) -> tuple[list[Task], Task]:
            task = replace(candidate, id=self._new_id(now, tasks))
            return [*tasks, task], task

        try:
            task = await self.with_collection(mutator)
        except Exception as e:
            logger.exception("Failed to create task title=%r", fields.get("title"))
            return TaskResult.fail(str(e))

        logger.debug("Task created id=%s category=%s priority=%s", task.id, task.category, task.priority)
        return TaskResult.ok(task)

    async def update(self, task_id: str, **fields: Any) -> TaskResult:
        """
        Shallow merge of `fields` over the stored task.

        Nested values (reminder) are replaced wholesale, not merged.
        """
        problem = self._check_fields(fields)
        if problem:
            logger.warning("Task update rejected id=%s: %s", task_id, problem)
            return TaskResult.fail(problem)

        stamp = iso_now(self.now())
        patch = {FIELD_KEYS[k]: to_storage_value(v) for k, v in fields.items()}

        def mutator(tasks: list[Task]) -> tuple[list[Task] | None, TaskResult]:
            for i, t in enumerate(tasks):
                if t.id != task_id:
                    continue
                record = t.to_dict()
                record.update(patch)
                record["updatedAt"] = stamp
                updated = Task.from_dict(record)
                out = list(tasks)
                out[i] = updated
                return out, TaskResult.ok(updated)
            return None, TaskResult.fail("Task not found")

        try:
            result = await self.with_collection(mutator)
        except TaskDecodeError as e:
            logger.warning("Task update failed id=%s: %s", task_id, e)
            return TaskResult.fail(str(e))
        except Exception as e:
            logger.exception("Failed to update task id=%s", task_id)
            return TaskResult.fail(str(e))

        logger.debug("Task update id=%s fields=%s success=%s", task_id, sorted(fields), result.success)
        return result

    async def delete(self, task_id: str) -> TaskResult:
        """Remove by id. Succeeds even if the id is absent."""

        def mutator(tasks: list[Task]) -> tuple[list[Task], TaskResult]:
            return [t for t in tasks if t.id != task_id], TaskResult.ok()

        try:
            result = await self.with_collection(mutator)
        except Exception as e:
            logger.exception("Failed to delete task id=%s", task_id)
            return TaskResult.fail(str(e))

        logger.debug("Task deleted id=%s", task_id)
        return result

    async def toggle_completion(self, task_id: str) -> TaskResult:
        stamp = iso_now(self.now())

        def mutator(tasks: list[Task]) -> tuple[list[Task] | None, TaskResult]:
            for i, t in enumerate(tasks):
                if t.id == task_id:
                    toggled = replace(t, completed=not t.completed, updated_at=stamp)
                    out = list(tasks)
                    out[i] = toggled
                    return out, TaskResult.ok(toggled)
            return None, TaskResult.fail("Task not found")

        try:
            result = await self.with_collection(mutator)
        except Exception as e:
            logger.exception("Failed to toggle task id=%s", task_id)
            return TaskResult.fail(str(e))

        if result.task is not None:
            logger.debug("Task toggled id=%s completed=%s", task_id, result.task.completed)
        return result

    async def clear_all(self) -> TaskResult:
        """Drop the whole collection (removes the storage key)."""
        try:
            await self._storage.remove(self._key)
        except Exception as e:
            logger.exception("Failed to clear tasks key=%s", self._key)
            return TaskResult.fail(str(e))
        logger.info("All tasks cleared key=%s", self._key)
        return TaskResult.ok()

    # ---- predicates (shared by queries and stats) ----

    def _is_today(self, task: Task, today: date) -> bool:
        due = self._due(task)
        return task.pending and due is not None and self._day(due) == today

    def _is_overdue(self, task: Task, today: date) -> bool:
        due = self._due(task)
        return task.pending and due is not None and self._day(due) < today

    # ---- derived queries ----

    async def by_category(self, category: str) -> list[Task]:
        wanted = str(category)
        return [t for t in await self.get_all() if str(t.category) == wanted]

    async def by_priority(self, priority: str) -> list[Task]:
        wanted = str(priority)
        return [t for t in await self.get_all() if str(t.priority) == wanted]

    async def pending(self) -> list[Task]:
        return [t for t in await self.get_all() if t.pending]

    async def completed(self) -> list[Task]:
        return [t for t in await self.get_all() if t.completed]

    async def today(self) -> list[Task]:
        """Pending tasks due on the current calendar day."""
        today = self._day(self.now())
        return [t for t in await self.get_all() if self._is_today(t, today)]

    async def upcoming(self, days: int | None = None) -> list[Task]:
        """Pending tasks due within [now, now + days], both ends inclusive."""
        now = self.now()
        horizon = now + timedelta(days=self._upcoming_days if days is None else days)
        out: list[Task] = []
        for t in await self.get_all():
            due = self._due(t)
            if t.pending and due is not None and now <= due <= horizon:
                out.append(t)
        return out

    async def overdue(self) -> list[Task]:
        """Pending tasks whose due day is before today. Completed tasks never count."""
        today = self._day(self.now())
        return [t for t in await self.get_all() if self._is_overdue(t, today)]

    async def search(self, term: str) -> list[Task]:
        needle = (term or "").lower()
        tasks = await self.get_all()
        if not needle:
            return tasks
        return [
            t
            for t in tasks
            if needle in t.title.lower()
            or needle in t.description.lower()
            or any(needle in tag.lower() for tag in t.tags)
        ]

    async def reminders(self, until: datetime | None = None) -> list[Task]:
        """
        Pending tasks with an enabled, computed reminder, earliest first.

        With `until`, only reminders due at or before that moment.
        """
        scheduled: list[tuple[datetime, Task]] = []
        for t in await self.get_all():
            if not t.pending or not t.reminder.enabled:
                continue
            at = parse_iso(t.reminder.reminder_time, tz=self._tz)
            if at is None:
                continue
            if until is not None and at > until:
                continue
            scheduled.append((at, t))
        scheduled.sort(key=lambda pair: pair[0])
        return [t for _, t in scheduled]

    async def stats(self) -> TaskStats | None:
        try:
            tasks = await self._load()
        except Exception:
            logger.exception("Failed to load tasks for stats key=%s", self._key)
            return None

        today = self._day(self.now())
        pending = [t for t in tasks if t.pending]

        priority_breakdown = {p.value: 0 for p in Priority}
        category_breakdown: dict[str, int] = {}
        for t in pending:
            priority_breakdown[str(t.priority)] = priority_breakdown.get(str(t.priority), 0) + 1
            category_breakdown[str(t.category)] = category_breakdown.get(str(t.category), 0) + 1

        return TaskStats(
            total=len(tasks),
            completed=len(tasks) - len(pending),
            pending=len(pending),
            overdue=sum(1 for t in tasks if self._is_overdue(t, today)),
            today=sum(1 for t in tasks if self._is_today(t, today)),
            priority_breakdown=priority_breakdown,
            category_breakdown=category_breakdown,
        )
