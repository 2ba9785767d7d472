"""
In-Memory Cache Backend

Process-local TTL cache using asyncio primitives.
Expired entries are dropped lazily on access and during writes.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

from recordkeeper.cache.ports import CacheBackend


@dataclass
class _Entry:
    value: str
    expires_at: float


class InMemoryCacheBackend(CacheBackend):
    """
    In-memory cache backend.

    Args:
        clock: Monotonic time source in seconds (injectable for tests)
        max_entries: Soft capacity; expired entries are purged when exceeded
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10000,
    ):
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        async with self._lock:
            now = self._clock()
            if len(self._entries) >= self._max_entries:
                self._purge_expired(now)
            self._entries[key] = _Entry(value=value, expires_at=now + ttl_seconds)

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            removed = 0
            for key in keys:
                if self._entries.pop(key, None) is not None:
                    removed += 1
            return removed

    def _purge_expired(self, now: float) -> None:
        """Drop expired entries. Caller holds the lock."""
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
