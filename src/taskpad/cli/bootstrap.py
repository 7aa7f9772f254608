# src/taskpad/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- binds one storage medium and one TaskStore into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStorage
from ..core.state import AppState
from ..prefs.prefs_store import AppSettingsStore, PreferencesStore
from ..storage.sqlite_kv import SqliteKeyValueStorage
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.storage_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, storage: KeyValueStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and storage injectable makes the app easier to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings();
    if storage is None, opens the SQLite database from settings.
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        _ensure_local_dirs(settings)
        storage = SqliteKeyValueStorage(settings.storage_db_path)

    task_store = TaskStore(
        storage,
        key=settings.tasks_key,
        tz=settings.zone(),
        serialize_writes=settings.serialize_writes,
        upcoming_days=settings.upcoming_days,
    )

    state = AppState(
        settings=settings,
        storage=storage,
        tasks=task_store,
        preferences=PreferencesStore(storage, key=settings.preferences_key),
        app_settings=AppSettingsStore(storage, key=settings.app_settings_key),
    )
    logger.debug("AppState created storage=%s", type(storage).__name__)
    return state
