# src/taskpad/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

ENV_PREFIX = "TASKPAD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    storage_db_path: Path

    # ---- Storage keys ----
    tasks_key: str
    preferences_key: str
    app_settings_key: str

    # ---- Task behaviour ----
    upcoming_days: int
    default_reminder_minutes: int
    serialize_writes: bool
    timezone: str

    def zone(self) -> tzinfo | None:
        """Configured zone for calendar-day queries; None means system local time."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            return None

    @staticmethod
    def from_env() -> "Settings":
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskpad"))

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskpad"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=data_dir,
            storage_db_path=_env_path(_k("STORAGE_DB_PATH"), data_dir / "storage.sqlite3"),
            tasks_key=_env(_k("TASKS_KEY"), "@tasks"),
            preferences_key=_env(_k("PREFERENCES_KEY"), "@user_preferences"),
            app_settings_key=_env(_k("APP_SETTINGS_KEY"), "@app_settings"),
            upcoming_days=max(0, _env_int(_k("UPCOMING_DAYS"), 7)),
            default_reminder_minutes=max(0, _env_int(_k("DEFAULT_REMINDER_MINUTES"), 10)),
            serialize_writes=_env_bool(_k("SERIALIZE_WRITES"), False),
            timezone=_env(_k("TIMEZONE"), "").strip(),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
