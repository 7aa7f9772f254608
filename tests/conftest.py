# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from taskpad.cli.bootstrap import create_initial_state
from taskpad.core.state import AppState
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeStorage

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def store(storage: FakeStorage, clock: FakeClock) -> TaskStore:
    """TaskStore over in-memory storage, frozen clock, calendar days in UTC."""
    return TaskStore(storage, clock=clock, tz=UTC)


@pytest.fixture()
def settings() -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskpad-test",
        log_level="DEBUG",
        tasks_key="@tasks",
        preferences_key="@user_preferences",
        app_settings_key="@app_settings",
        upcoming_days=7,
        default_reminder_minutes=10,
        serialize_writes=False,
        zone=lambda: UTC,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, storage: FakeStorage) -> AppState:
    """AppState wired with the in-memory storage instead of SQLite."""
    return create_initial_state(settings=settings, storage=storage)
