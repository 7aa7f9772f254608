# tests/test_concurrency.py

from __future__ import annotations

import asyncio

import pytest

from taskpad.tasks.task_models import Task
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeStorage


async def _seed(store: TaskStore) -> tuple[str, str]:
    a = (await store.create(title="a")).task
    b = (await store.create(title="b")).task
    assert a is not None and b is not None
    return a.id, b.id


@pytest.mark.asyncio
async def test_overlapping_toggles_lose_an_update_without_serialization(clock: FakeClock) -> None:
    storage = FakeStorage()
    store = TaskStore(storage, clock=clock)
    a_id, b_id = await _seed(store)

    storage.read_delay = 0.01
    r1, r2 = await asyncio.gather(store.toggle_completion(a_id), store.toggle_completion(b_id))
    assert r1.success and r2.success

    storage.read_delay = 0.0
    completed = {t.id for t in await store.completed()}
    # Both loaded the same snapshot; the later write replaced the whole collection.
    assert len(completed) == 1
    assert completed <= {a_id, b_id}


@pytest.mark.asyncio
async def test_serialized_store_applies_both_toggles(clock: FakeClock) -> None:
    storage = FakeStorage()
    store = TaskStore(storage, clock=clock, serialize_writes=True)
    a_id, b_id = await _seed(store)

    storage.read_delay = 0.01
    await asyncio.gather(store.toggle_completion(a_id), store.toggle_completion(b_id))

    storage.read_delay = 0.0
    assert {t.id for t in await store.completed()} == {a_id, b_id}


@pytest.mark.asyncio
async def test_with_collection_skips_write_when_mutator_returns_none(
    store: TaskStore, storage: FakeStorage
) -> None:
    await store.create(title="a")
    writes = storage.set_calls

    def count(tasks: list[Task]) -> tuple[None, int]:
        return None, len(tasks)

    assert await store.with_collection(count) == 1
    assert storage.set_calls == writes


@pytest.mark.asyncio
async def test_with_collection_persists_mutator_output(store: TaskStore) -> None:
    await store.create(title="keep")
    await store.create(title="drop")

    def drop_second(tasks: list[Task]) -> tuple[list[Task], str]:
        return tasks[:1], tasks[1].title

    assert await store.with_collection(drop_second) == "drop"
    assert [t.title for t in await store.get_all()] == ["keep"]


@pytest.mark.asyncio
async def test_with_collection_propagates_load_errors(store: TaskStore, storage: FakeStorage) -> None:
    storage.fail_get = True
    with pytest.raises(OSError):
        await store.with_collection(lambda tasks: (tasks, None))
