"""
Redis Storage Adapter

Document-store implementation of RecordStore on top of Redis.
Each record is a JSON document; ordering and filtering happen client-side
over the creation-time index.

Key patterns:
- {prefix}:record:{id} -> JSON-encoded Record
- {prefix}:record:seq -> INCR counter for id assignment
- {prefix}:record:by-created -> ZSET of ids scored by creation timestamp

Uses redis.asyncio for async operations.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Iterator

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from recordkeeper.errors import StorageError, StoreConnectionError, ValidationError
from recordkeeper.storage.memory import filter_records, order_records, paginate
from recordkeeper.storage.ports import (
    Record,
    RecordOrder,
    RecordStore,
    page_bounds,
    utcnow,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Serialization Helpers
# =============================================================================

def _serialize_record(record: Record) -> str:
    """Serialize Record to JSON."""
    return json.dumps(record.to_dict())


def _deserialize_record(data: bytes | str) -> Record:
    """Deserialize JSON to Record."""
    if isinstance(data, bytes):
        data = data.decode()
    try:
        return Record.from_dict(json.loads(data))
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Malformed record document: {e}") from e


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Map redis exceptions onto the storage error taxonomy."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError, OSError) as e:
        raise StoreConnectionError(f"{operation}: redis unreachable: {e}") from e
    except RedisError as e:
        raise StorageError(f"{operation}: {e}") from e


# =============================================================================
# Redis Record Store
# =============================================================================

class RedisRecordStore(RecordStore):
    """
    Redis-based record store.

    Ids come from an atomic INCR, so they are unique across processes
    sharing the same Redis.
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "recordkeeper",
        owns_client: bool = False,
    ) -> None:
        """
        Initialize Redis record store.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys (multi-tenant isolation)
            owns_client: Whether close() should close the client

        Raises:
            ValidationError: If no client is given
        """
        if redis is None:
            raise ValidationError("redis client is required for RedisRecordStore")
        self._redis = redis
        self._prefix = key_prefix
        self._owns_client = owns_client

    @classmethod
    def from_url(cls, redis_url: str | None, key_prefix: str = "recordkeeper") -> RedisRecordStore:
        """
        Build a store with its own client.

        Raises:
            ValidationError: If redis_url is missing
        """
        if not redis_url or not redis_url.strip():
            raise ValidationError("redis_url is required for Redis storage")
        client = Redis.from_url(redis_url.strip(), decode_responses=False)
        return cls(client, key_prefix=key_prefix, owns_client=True)

    def _record_key(self, record_id: int) -> str:
        """Key for a record document."""
        return f"{self._prefix}:record:{record_id}"

    def _seq_key(self) -> str:
        """Key for the id counter."""
        return f"{self._prefix}:record:seq"

    def _index_key(self) -> str:
        """Key for the creation-time index."""
        return f"{self._prefix}:record:by-created"

    async def _load_many(self, ids: list[bytes | str]) -> list[Record]:
        """Pipeline-fetch documents for the given ids, skipping missing ones."""
        if not ids:
            return []
        pipe = self._redis.pipeline()
        for raw_id in ids:
            record_id = int(raw_id.decode() if isinstance(raw_id, bytes) else raw_id)
            pipe.get(self._record_key(record_id))
        values = await pipe.execute()
        return [_deserialize_record(v) for v in values if v]

    async def get_latest(self) -> Record | None:
        with _translate_errors("get_latest"):
            ids = await self._redis.zrevrange(self._index_key(), 0, 0)
            records = await self._load_many(ids)
        return records[0] if records else None

    async def get_by_id(self, record_id: int) -> Record | None:
        with _translate_errors("get_by_id"):
            data = await self._redis.get(self._record_key(record_id))
        return _deserialize_record(data) if data else None

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        if page_bounds(page, page_size) is None:
            return []
        records = await self._all_records("list")
        matched = filter_records(records, filter)
        ordered = order_records(matched, RecordOrder.parse(order_by), descending)
        return paginate(ordered, page, page_size)

    async def list_all(self) -> list[Record]:
        records = await self._all_records("list_all")
        return order_records(records, RecordOrder.CREATED_AT, descending=True)

    async def _all_records(self, operation: str) -> list[Record]:
        with _translate_errors(operation):
            ids = await self._redis.zrange(self._index_key(), 0, -1)
            return await self._load_many(ids)

    async def save(self, record: Record) -> Record:
        with _translate_errors("save"):
            record_id = int(await self._redis.incr(self._seq_key()))
            saved = Record(id=record_id, message=record.message, created_at=utcnow())

            pipe = self._redis.pipeline()
            pipe.set(self._record_key(record_id), _serialize_record(saved))
            pipe.zadd(self._index_key(), {str(record_id): saved.created_at.timestamp()})
            await pipe.execute()

        logger.debug(f"Stored record document {record_id}")
        return saved

    async def ping(self) -> None:
        with _translate_errors("ping"):
            await self._redis.ping()

    async def close(self) -> None:
        if self._owns_client:
            await self._redis.aclose()
