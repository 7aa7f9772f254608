# src/taskpad/prefs/prefs_store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from ..core.ports import KeyValueStorage
from .prefs_models import AppSettings, Preferences, StoreResult

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "@user_preferences"
APP_SETTINGS_KEY = "@app_settings"


async def _read_json(storage: KeyValueStorage, key: str) -> Any | None:
    raw = await storage.get(key)
    return json.loads(raw) if raw else None


class PreferencesStore:
    """User preferences as one JSON object under one key. Defaults when nothing is stored."""

    def __init__(self, storage: KeyValueStorage, *, key: str = PREFERENCES_KEY) -> None:
        self._storage = storage
        self._key = key

    async def get(self) -> Preferences | None:
        try:
            data = await _read_json(self._storage, self._key)
            return Preferences() if data is None else Preferences.from_dict(data)
        except Exception:
            logger.exception("Failed to load preferences key=%s", self._key)
            return None

    async def save(self, prefs: Preferences) -> StoreResult:
        try:
            await self._storage.set(self._key, json.dumps(prefs.to_dict(), ensure_ascii=False))
        except Exception as e:
            logger.exception("Failed to save preferences key=%s", self._key)
            return StoreResult(success=False, error=str(e))
        return StoreResult(success=True)

    async def update(self, name: str, value: Any) -> StoreResult:
        if name not in Preferences.field_names():
            return StoreResult(success=False, error=f"Unknown preference: {name}")
        problem = Preferences.check_value(name, value)
        if problem:
            return StoreResult(success=False, error=problem)
        prefs = await self.get()
        if prefs is None:
            return StoreResult(success=False, error="Preferences could not be loaded")
        return await self.save(replace(prefs, **{name: value}))


class AppSettingsStore:
    def __init__(self, storage: KeyValueStorage, *, key: str = APP_SETTINGS_KEY) -> None:
        self._storage = storage
        self._key = key

    async def get(self) -> AppSettings | None:
        try:
            data = await _read_json(self._storage, self._key)
            return AppSettings() if data is None else AppSettings.from_dict(data)
        except Exception:
            logger.exception("Failed to load app settings key=%s", self._key)
            return None

    async def save(self, settings: AppSettings) -> StoreResult:
        try:
            await self._storage.set(self._key, json.dumps(settings.to_dict(), ensure_ascii=False))
        except Exception as e:
            logger.exception("Failed to save app settings key=%s", self._key)
            return StoreResult(success=False, error=str(e))
        return StoreResult(success=True)

    async def set_launched(self) -> StoreResult:
        settings = await self.get()
        if settings is None:
            return StoreResult(success=False, error="App settings could not be loaded")
        return await self.save(replace(settings, first_launch=False))


async def clear_all_storage(storage: KeyValueStorage, keys: Iterable[str]) -> StoreResult:
    """Remove every given key (debug / factory reset)."""
    try:
        for key in keys:
            await storage.remove(key)
    except Exception as e:
        logger.exception("Failed to clear storage")
        return StoreResult(success=False, error=str(e))
    logger.info("Storage cleared")
    return StoreResult(success=True)
