"""
In-Memory Storage Adapter

Thread-safe implementation for development and testing.
Uses an asyncio lock for concurrent async safety.

Records live in memory and are lost on restart.
Use for:
- Local development
- Unit/integration testing
- Single-node deployments without persistence requirements
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Iterable

from recordkeeper.storage.ports import (
    Record,
    RecordOrder,
    RecordStore,
    normalize_filter,
    page_bounds,
    utcnow,
)


# =============================================================================
# Query Helpers (shared with document stores that sort client-side)
# =============================================================================

def filter_records(records: Iterable[Record], filter: str | None) -> list[Record]:
    """Keep records whose message contains filter, case-insensitively."""
    needle = normalize_filter(filter)
    if needle is None:
        return list(records)
    needle = needle.lower()
    return [r for r in records if needle in r.message.lower()]


def order_records(
    records: Iterable[Record],
    order_by: RecordOrder,
    descending: bool,
) -> list[Record]:
    """Sort by the chosen field, ties broken by id in the same direction."""
    if order_by == RecordOrder.MESSAGE:
        key = lambda r: (r.message, r.id)  # noqa: E731
    else:
        key = lambda r: (r.created_at, r.id)  # noqa: E731
    return sorted(records, key=key, reverse=descending)


def paginate(records: list[Record], page: int, page_size: int) -> list[Record]:
    bounds = page_bounds(page, page_size)
    if bounds is None:
        return []
    offset, limit = bounds
    return records[offset:offset + limit]


# =============================================================================
# In-Memory Record Store
# =============================================================================

class InMemoryRecordStore(RecordStore):
    """
    In-memory record storage.

    Uses dict with asyncio.Lock for thread-safety. Returned records are
    copies, so callers cannot mutate stored state.
    """

    def __init__(self):
        self._records: dict[int, Record] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def get_latest(self) -> Record | None:
        async with self._lock:
            if not self._records:
                return None
            latest = max(self._records.values(), key=lambda r: (r.created_at, r.id))
            return replace(latest)

    async def get_by_id(self, record_id: int) -> Record | None:
        async with self._lock:
            record = self._records.get(record_id)
            return replace(record) if record else None

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        async with self._lock:
            snapshot = [replace(r) for r in self._records.values()]

        matched = filter_records(snapshot, filter)
        ordered = order_records(matched, RecordOrder.parse(order_by), descending)
        return paginate(ordered, page, page_size)

    async def list_all(self) -> list[Record]:
        async with self._lock:
            snapshot = [replace(r) for r in self._records.values()]
        return order_records(snapshot, RecordOrder.CREATED_AT, descending=True)

    async def save(self, record: Record) -> Record:
        async with self._lock:
            stored = Record(
                id=self._next_id,
                message=record.message,
                created_at=utcnow(),
            )
            self._next_id += 1
            self._records[stored.id] = stored
            return replace(stored)
