# tests/test_task_api.py

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from taskpad.tasks.task_api import (
    SortKey,
    add_task,
    compute_reminder_time,
    filter_tasks,
    is_valid_task,
    sort_tasks,
    validate_task_input,
)
from taskpad.tasks.task_models import Priority, Task
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeStorage


def _task(
    task_id: str,
    *,
    title: str = "t",
    description: str = "",
    category: str = "work",
    priority: Priority = Priority.MEDIUM,
    completed: bool = False,
    date: str = "2026-10-17T12:00:00.000Z",
    created_at: str = "2026-10-01T00:00:00.000Z",
) -> Task:
    return Task(
        id=task_id,
        title=title,
        description=description,
        category=category,
        priority=priority,
        completed=completed,
        date=date,
        time="12:00:00",
        created_at=created_at,
        updated_at=created_at,
    )


def test_title_validation() -> None:
    assert is_valid_task({"title": "Buy milk"})
    assert not is_valid_task({"title": ""})
    assert not is_valid_task({"title": "   "})
    assert not is_valid_task({})
    assert validate_task_input({"title": ""}) == "Please enter a title for your task"
    assert validate_task_input({"title": "ok"}) is None


def test_reminder_time_is_due_moment_minus_lead() -> None:
    assert (
        compute_reminder_time("2026-10-20T00:00:00.000Z", "14:30", 30, tz=UTC)
        == "2026-10-20T14:00:00.000Z"
    )
    # the time-of-day format the mobile client writes
    assert (
        compute_reminder_time(
            "2026-10-20T08:00:00.000Z", "09:15:42 GMT+0000 (Coordinated Universal Time)", 10, tz=UTC
        )
        == "2026-10-20T09:05:00.000Z"
    )
    # a full timestamp for the time part; a day-long lead crosses midnight
    assert (
        compute_reminder_time(
            datetime(2026, 10, 20, tzinfo=UTC), "2026-01-01T07:00:00+00:00", 1440, tz=UTC
        )
        == "2026-10-19T07:00:00.000Z"
    )


def test_reminder_time_unparseable_parts() -> None:
    assert compute_reminder_time("someday", "10:00", 10, tz=UTC) is None
    assert compute_reminder_time("2026-10-20", "noonish", 10, tz=UTC) is None
    assert compute_reminder_time("2026-10-20", "25:00", 10, tz=UTC) is None


@pytest.mark.asyncio
async def test_add_task_rejects_empty_title_before_the_store(
    store: TaskStore, storage: FakeStorage
) -> None:
    res = await add_task(store, title="  ")
    assert not res.success
    assert res.error == "Please enter a title for your task"
    assert storage.data == {}


@pytest.mark.asyncio
async def test_add_task_fills_reminder_time(store: TaskStore) -> None:
    res = await add_task(
        store,
        tz=UTC,
        title="Standup",
        date="2026-10-18T00:00:00.000Z",
        time="09:30",
        reminder={"enabled": True, "minutes": 15},
    )
    assert res.success and res.task is not None
    assert res.task.reminder.reminder_time == "2026-10-18T09:15:00.000Z"

    stored = await store.get_by_id(res.task.id)
    assert stored is not None
    assert stored.reminder.reminder_time == "2026-10-18T09:15:00.000Z"


@pytest.mark.asyncio
async def test_add_task_keeps_disabled_reminder_uncomputed(store: TaskStore) -> None:
    res = await add_task(
        store,
        tz=UTC,
        title="Someday",
        date="2026-10-18T00:00:00.000Z",
        time="09:30",
        reminder={"enabled": False, "minutes": 15},
    )
    assert res.success and res.task is not None
    assert res.task.reminder.enabled is False
    assert res.task.reminder.reminder_time is None


@pytest.mark.asyncio
async def test_add_task_rejects_malformed_reminder(store: TaskStore) -> None:
    res = await add_task(store, title="x", reminder={"enabled": "yes"})
    assert not res.success


def test_filter_tasks_by_query_status_category_priority() -> None:
    tasks = [
        _task("1", title="Buy milk", category="shopping"),
        _task("2", title="Report", description="buy time", priority=Priority.HIGH),
        _task("3", title="Run", category="health", completed=True),
    ]

    assert [t.id for t in filter_tasks(tasks, query="BUY")] == ["1", "2"]
    assert [t.id for t in filter_tasks(tasks, status="pending")] == ["1", "2"]
    assert [t.id for t in filter_tasks(tasks, status="completed")] == ["3"]
    assert [t.id for t in filter_tasks(tasks, category="health")] == ["3"]
    assert [t.id for t in filter_tasks(tasks, category="all")] == ["1", "2", "3"]
    assert [t.id for t in filter_tasks(tasks, priority="high")] == ["2"]
    assert [t.id for t in filter_tasks(tasks, query="buy", category="shopping")] == ["1"]


def test_filter_tasks_rejects_unknown_status() -> None:
    with pytest.raises(ValueError):
        filter_tasks([], status="archived")


def test_sort_tasks_orders() -> None:
    a = _task("a", category="work", priority=Priority.LOW, created_at="2026-10-01T00:00:00.000Z",
              date="2026-10-20T00:00:00.000Z")
    b = _task("b", category="health", priority=Priority.HIGH, created_at="2026-10-03T00:00:00.000Z",
              date="2026-10-18T00:00:00.000Z", completed=True)
    c = _task("c", category="personal", priority=Priority.MEDIUM, created_at="2026-10-02T00:00:00.000Z",
              date="2026-10-25T00:00:00.000Z")
    tasks = [a, b, c]

    assert [t.id for t in sort_tasks(tasks, SortKey.CREATED)] == ["b", "c", "a"]
    assert [t.id for t in sort_tasks(tasks, "due")] == ["c", "a", "b"]
    assert [t.id for t in sort_tasks(tasks, "priority")] == ["b", "c", "a"]
    assert [t.id for t in sort_tasks(tasks, "category")] == ["b", "c", "a"]
    assert [t.id for t in sort_tasks(tasks, "status")] == ["a", "c", "b"]
    # input is not modified
    assert tasks == [a, b, c]


@pytest.mark.asyncio
async def test_add_task_without_date_uses_the_store_clock(store: TaskStore, clock) -> None:
    res = await add_task(store, title="no date")
    assert res.success and res.task is not None
    assert res.task.date == "2026-10-17T12:00:00.000Z"
    assert res.task.reminder.reminder_time == "2026-10-17T11:50:00.000Z"

    clock.advance(hours=3)
    later = await add_task(store, title="later", date="", reminder={"enabled": True, "minutes": 30})
    assert later.success and later.task is not None
    assert later.task.date == "2026-10-17T15:00:00.000Z"
    assert later.task.reminder.reminder_time == "2026-10-17T14:30:00.000Z"


def test_sort_by_priority_puts_foreign_levels_last() -> None:
    odd = _task("odd", priority="urgent")  # type: ignore[arg-type]
    low = _task("low", priority=Priority.LOW)
    high = _task("high", priority=Priority.HIGH)
    assert [t.id for t in sort_tasks([odd, low, high], "priority")] == ["high", "low", "odd"]
