"""
Read-Through Cache

CachingRecordStore wraps any RecordStore and serves reads from a
CacheBackend when an unexpired entry exists.

Cache keys are a deterministic function of the query shape:
- last
- by-id:{id}
- list:{page}:{page_size}:{order_by}:{desc}:{filter}
- all

On save, only "last" and "by-id:{new id}" are invalidated. Listing keys are
left to expire on their own, so a page may lag behind writes for up to one
TTL.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable, TypeVar

from recordkeeper.cache.ports import DEFAULT_TTL_SECONDS, CacheBackend
from recordkeeper.errors import CacheCorruptionError, CacheInvalidationError
from recordkeeper.storage.ports import (
    Record,
    RecordOrder,
    RecordStore,
    normalize_filter,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

LATEST_KEY = "last"
ALL_KEY = "all"


def by_id_key(record_id: int) -> str:
    return f"by-id:{record_id}"


def list_key(
    page: int,
    page_size: int,
    order_by: RecordOrder,
    descending: bool,
    filter: str | None,
) -> str:
    return (
        f"list:{page}:{page_size}:{order_by.value}:"
        f"{'true' if descending else 'false'}:{filter or ''}"
    )


# =============================================================================
# Codecs
# =============================================================================

def _encode_one(record: Record) -> str:
    return json.dumps(record.to_dict())


def _decode_one(payload: str) -> Record:
    data = json.loads(payload)
    if not isinstance(data, dict):
        raise TypeError("expected a record object")
    return Record.from_dict(data)


def _encode_many(records: list[Record]) -> str:
    return json.dumps([r.to_dict() for r in records])


def _decode_many(payload: str) -> list[Record]:
    data = json.loads(payload)
    if not isinstance(data, list):
        raise TypeError("expected a list of records")
    return [Record.from_dict(item) for item in data]


# =============================================================================
# Caching Record Store
# =============================================================================

class CachingRecordStore(RecordStore):
    """
    Read-through cache decorator for a RecordStore.

    Not-found results (None) are not cached. Inner failures propagate
    unchanged and leave the cache untouched. Corrupt entries are dropped
    before CacheCorruptionError is raised.
    """

    def __init__(
        self,
        inner: RecordStore,
        backend: CacheBackend,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ):
        """
        Args:
            inner: Store that answers cache misses and all writes
            backend: Where cache entries live
            ttl_seconds: Absolute lifetime of each entry
        """
        self._inner = inner
        self._backend = backend
        self._ttl = ttl_seconds

    async def _read_through(
        self,
        key: str,
        load: Callable[[], Awaitable[T]],
        encode: Callable[[Any], str],
        decode: Callable[[str], T],
    ) -> T:
        cached = await self._backend.get(key)
        if cached is not None:
            try:
                value = decode(cached)
            except (KeyError, TypeError, ValueError) as e:
                # Drop it so the next read reloads from the store
                await self._backend.delete(key)
                logger.warning(f"Dropped corrupt cache entry {key}: {e}")
                raise CacheCorruptionError(key, str(e)) from e
            logger.debug(f"Cache hit: {key}")
            return value

        logger.debug(f"Cache miss: {key}")
        value = await load()
        if value is not None:
            await self._backend.set(key, encode(value), self._ttl)
        return value

    async def get_latest(self) -> Record | None:
        return await self._read_through(
            LATEST_KEY, self._inner.get_latest, _encode_one, _decode_one
        )

    async def get_by_id(self, record_id: int) -> Record | None:
        return await self._read_through(
            by_id_key(record_id),
            lambda: self._inner.get_by_id(record_id),
            _encode_one,
            _decode_one,
        )

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        order = RecordOrder.parse(order_by)
        needle = normalize_filter(filter)
        return await self._read_through(
            list_key(page, page_size, order, descending, needle),
            lambda: self._inner.list(page, page_size, order, descending, needle),
            _encode_many,
            _decode_many,
        )

    async def list_all(self) -> list[Record]:
        return await self._read_through(
            ALL_KEY, self._inner.list_all, _encode_many, _decode_many
        )

    async def save(self, record: Record) -> Record:
        """
        Raises:
            CacheInvalidationError: If the record was stored but its cache
                keys could not be dropped
        """
        saved = await self._inner.save(record)
        keys = (LATEST_KEY, by_id_key(saved.id))
        try:
            await self.invalidate(*keys)
        except Exception as e:
            logger.error(f"Record {saved.id} saved but cache invalidation failed: {e}")
            raise CacheInvalidationError(saved, keys, e) from e
        return saved

    async def invalidate(self, *keys: str) -> None:
        """Drop specific cache entries."""
        removed = await self._backend.delete(*keys)
        logger.debug(f"Invalidated {removed} cache entries: {', '.join(keys)}")

    async def initialize(self) -> None:
        await self._inner.initialize()

    async def ping(self) -> None:
        await self._inner.ping()

    async def close(self) -> None:
        await self._inner.close()
        await self._backend.close()
