# tests/fakes.py

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta


class FakeStorage:
    """
    In-memory KeyValueStorage for unit tests.

    - Failure injection per operation (fail_get / fail_set / fail_remove)
    - Optional read latency: the value is captured first, then the call sleeps,
      so overlapping callers can observe the same stale snapshot
    - Counts writes for assertions
    """

    def __init__(self, data: dict[str, str] | None = None, *, read_delay: float = 0.0) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.read_delay = read_delay
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.set_calls = 0

    async def get(self, key: str) -> str | None:
        if self.fail_get:
            raise OSError("simulated read failure")
        value = self.data.get(key)
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        return value

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise OSError("simulated write failure")
        self.set_calls += 1
        self.data[key] = value

    async def remove(self, key: str) -> None:
        if self.fail_remove:
            raise OSError("simulated remove failure")
        self.data.pop(key, None)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)
