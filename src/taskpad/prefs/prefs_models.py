# src/taskpad/prefs/prefs_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any


@dataclass(slots=True, frozen=True)
class StoreResult:
    success: bool
    error: str | None = None


@dataclass(slots=True)
class Preferences:
    theme: str = "light"
    notifications: bool = True
    default_reminder: int = 10
    sort_by: str = "date"
    view_mode: str = "list"

    _KEYS = {
        "theme": "theme",
        "notifications": "notifications",
        "default_reminder": "defaultReminder",
        "sort_by": "sortBy",
        "view_mode": "viewMode",
    }

    def to_dict(self) -> dict[str, Any]:
        return {self._KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Any) -> Preferences:
        if not isinstance(data, dict):
            raise ValueError(f"preferences must be an object, got {type(data).__name__}")
        defaults = cls()
        kwargs = {name: data.get(key, getattr(defaults, name)) for name, key in cls._KEYS.items()}
        return cls(**kwargs)

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def check_value(cls, name: str, value: Any) -> str | None:
        """Problem with `value` for preference `name`, or None. Types follow the defaults."""
        expected = type(getattr(cls(), name))
        if expected is int and isinstance(value, bool):
            return f"{name} must be a whole number"
        if not isinstance(value, expected):
            kind = {bool: "on/off", int: "a whole number", str: "text"}[expected]
            return f"{name} must be {kind}, got {value!r}"
        if expected is int and value < 0:
            return f"{name} must not be negative"
        return None


@dataclass(slots=True)
class AppSettings:
    first_launch: bool = True
    last_version: str = "1.0.0"
    language: str = "en"

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstLaunch": self.first_launch,
            "lastVersion": self.last_version,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: Any) -> AppSettings:
        if not isinstance(data, dict):
            raise ValueError(f"app settings must be an object, got {type(data).__name__}")
        return cls(
            first_launch=bool(data.get("firstLaunch", True)),
            last_version=str(data.get("lastVersion", "1.0.0")),
            language=str(data.get("language", "en")),
        )
