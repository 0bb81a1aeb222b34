"""Per-period locks serializing snapshot generation."""

from __future__ import annotations

import asyncio


class PeriodLockRegistry:
    """In-process ``asyncio.Lock`` per (year, month).

    Serializes generation inside one worker process. Across processes the
    payroll service additionally takes a PostgreSQL advisory lock.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[int, int], asyncio.Lock] = {}

    def lock_for(self, year: int, month: int) -> asyncio.Lock:
        key = (year, month)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def is_locked(self, year: int, month: int) -> bool:
        lock = self._locks.get((year, month))
        return lock is not None and lock.locked()


period_locks = PeriodLockRegistry()
