# src/taskpad/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores depend on Protocols instead of concrete implementations.
This keeps the persistence medium swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime, tzinfo
from typing import Any, Protocol

Clock = Callable[[], datetime]
# Returns the current instant as an aware datetime.


class KeyValueStorage(Protocol):
    """
    Async string key-value medium.

    Any call may raise; callers own the error policy.
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class TaskRepo(Protocol):
    @property
    def tz(self) -> tzinfo | None: ...
    def now(self) -> datetime: ...

    # CRUD
    async def get_all(self) -> list[Any]: ...
    async def get_by_id(self, task_id: str) -> Any | None: ...
    async def create(self, **fields: Any) -> Any: ...
    async def update(self, task_id: str, **fields: Any) -> Any: ...
    async def delete(self, task_id: str) -> Any: ...
    async def toggle_completion(self, task_id: str) -> Any: ...
    async def clear_all(self) -> Any: ...

    # Derived queries
    async def by_category(self, category: str) -> list[Any]: ...
    async def by_priority(self, priority: str) -> list[Any]: ...
    async def today(self) -> list[Any]: ...
    async def upcoming(self, days: int = 7) -> list[Any]: ...
    async def overdue(self) -> list[Any]: ...
    async def search(self, term: str) -> list[Any]: ...
    async def pending(self) -> list[Any]: ...
    async def completed(self) -> list[Any]: ...
    async def reminders(self, until: datetime | None = None) -> list[Any]: ...
    async def stats(self) -> Any | None: ...
