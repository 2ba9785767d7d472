"""
Shared test doubles for record store tests.
"""

from collections import Counter

import pytest

from recordkeeper.errors import StoreConnectionError
from recordkeeper.storage.memory import InMemoryRecordStore
from recordkeeper.storage.ports import Record, RecordOrder, RecordStore


class CountingStore(RecordStore):
    """In-memory store that counts calls per operation."""

    def __init__(self, inner: RecordStore | None = None):
        self.inner = inner or InMemoryRecordStore()
        self.calls: Counter = Counter()

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def get_latest(self):
        self.calls["get_latest"] += 1
        return await self.inner.get_latest()

    async def get_by_id(self, record_id):
        self.calls["get_by_id"] += 1
        return await self.inner.get_by_id(record_id)

    async def list(self, page, page_size, order_by=RecordOrder.CREATED_AT, descending=False, filter=None):
        self.calls["list"] += 1
        return await self.inner.list(page, page_size, order_by, descending, filter)

    async def list_all(self):
        self.calls["list_all"] += 1
        return await self.inner.list_all()

    async def save(self, record):
        self.calls["save"] += 1
        return await self.inner.save(record)


class FailingStore(RecordStore):
    """Store whose every operation raises the configured error."""

    def __init__(self, error: Exception | None = None):
        self.error = error or StoreConnectionError("store unreachable")
        self.calls = 0

    async def _fail(self):
        self.calls += 1
        raise self.error

    async def get_latest(self):
        return await self._fail()

    async def get_by_id(self, record_id):
        return await self._fail()

    async def list(self, page, page_size, order_by=RecordOrder.CREATED_AT, descending=False, filter=None):
        return await self._fail()

    async def list_all(self):
        return await self._fail()

    async def save(self, record):
        return await self._fail()

    async def ping(self):
        await self._fail()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def counting_store():
    return CountingStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def no_sleep():
    return RecordingSleep()


async def seed(store: RecordStore, *messages: str) -> list[Record]:
    """Save records in order and return them."""
    return [await store.save(Record(message=m)) for m in messages]
