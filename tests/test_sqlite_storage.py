# tests/test_sqlite_storage.py

from __future__ import annotations

from datetime import UTC
from pathlib import Path

import pytest

from taskpad.storage.sqlite_kv import SqliteKeyValueStorage
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeClock


@pytest.mark.asyncio
async def test_get_set_remove(tmp_path: Path) -> None:
    kv = SqliteKeyValueStorage(tmp_path / "kv.sqlite3")

    assert await kv.get("@tasks") is None

    await kv.set("@tasks", "[]")
    assert await kv.get("@tasks") == "[]"

    await kv.set("@tasks", '[{"id": "1"}]')
    assert await kv.get("@tasks") == '[{"id": "1"}]'

    await kv.remove("@tasks")
    assert await kv.get("@tasks") is None

    # removing a missing key is not an error
    await kv.remove("@tasks")


@pytest.mark.asyncio
async def test_values_survive_reopen(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "kv.sqlite3"
    await SqliteKeyValueStorage(db).set("@user_preferences", '{"theme": "dark"}')

    reopened = SqliteKeyValueStorage(db)
    assert await reopened.get("@user_preferences") == '{"theme": "dark"}'


@pytest.mark.asyncio
async def test_rejects_non_string_values(tmp_path: Path) -> None:
    kv = SqliteKeyValueStorage(tmp_path / "kv.sqlite3")
    with pytest.raises(TypeError):
        await kv.set("@tasks", ["not", "a", "string"])  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_task_store_over_sqlite(tmp_path: Path, clock: FakeClock) -> None:
    db = tmp_path / "storage.sqlite3"
    store = TaskStore(SqliteKeyValueStorage(db), clock=clock, tz=UTC)

    created = (await store.create(title="Persisted", tags=["disk"])).task
    assert created is not None
    assert (await store.toggle_completion(created.id)).success

    fresh = TaskStore(SqliteKeyValueStorage(db), clock=clock, tz=UTC)
    again = await fresh.get_by_id(created.id)
    assert again is not None
    assert again.title == "Persisted"
    assert again.completed is True
    assert (await fresh.search("disk"))[0].id == created.id
