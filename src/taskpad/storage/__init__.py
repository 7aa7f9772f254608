"""Persistence media for the task and preference stores."""

from .sqlite_kv import SqliteKeyValueStorage

__all__ = ["SqliteKeyValueStorage"]
