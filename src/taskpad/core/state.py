# src/taskpad/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..prefs.prefs_store import AppSettingsStore, PreferencesStore
from .ports import KeyValueStorage, TaskRepo


@dataclass
class AppState:
    """
    Everything a front end needs, wired once in the composition root.

    Front ends only talk to the stores; none of them touch `storage` directly.
    """

    # Settings object (real Settings or a test stand-in).
    settings: Any

    storage: KeyValueStorage
    tasks: TaskRepo
    preferences: PreferencesStore
    app_settings: AppSettingsStore
