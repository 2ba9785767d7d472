"""
Redis document adapter tests against a mocked client.
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from recordkeeper.errors import StorageError, StoreConnectionError, ValidationError
from recordkeeper.storage.ports import Record
from recordkeeper.storage.redis import RedisRecordStore


def _doc(record_id: int, message: str, minute: int) -> bytes:
    created = datetime(2024, 1, 1, 12, minute, tzinfo=timezone.utc)
    return json.dumps(
        {"id": record_id, "message": message, "created_at": created.isoformat()}
    ).encode()


@pytest.fixture
def pipe():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[])
    return pipe


@pytest.fixture
def redis(pipe):
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.incr = AsyncMock(return_value=1)
    client.zrange = AsyncMock(return_value=[])
    client.zrevrange = AsyncMock(return_value=[])
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    client.pipeline = MagicMock(return_value=pipe)
    return client


@pytest.fixture
def store(redis):
    return RedisRecordStore(redis, key_prefix="test")


class TestRedisRecordStore:
    """Key layout and document handling."""

    @pytest.mark.parametrize("url", [None, "", "  "])
    def test_missing_url_raises_validation_error(self, url):
        with pytest.raises(ValidationError):
            RedisRecordStore.from_url(url)

    def test_missing_client_raises_validation_error(self):
        with pytest.raises(ValidationError):
            RedisRecordStore(None)

    @pytest.mark.asyncio
    async def test_save_assigns_id_from_counter_and_indexes_document(self, store, redis, pipe):
        redis.incr.return_value = 7

        saved = await store.save(Record(message="hello", id=99))

        assert saved.id == 7
        assert saved.created_at is not None
        redis.incr.assert_awaited_once_with("test:record:seq")
        key, payload = pipe.set.call_args.args
        assert key == "test:record:7"
        assert json.loads(payload)["message"] == "hello"
        index_key, mapping = pipe.zadd.call_args.args
        assert index_key == "test:record:by-created"
        assert mapping == {"7": saved.created_at.timestamp()}
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_by_id_decodes_document(self, store, redis):
        redis.get.return_value = _doc(3, "three", 3)

        record = await store.get_by_id(3)

        redis.get.assert_awaited_once_with("test:record:3")
        assert record.id == 3
        assert record.message == "three"
        assert record.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_by_id_missing_returns_none(self, store):
        assert await store.get_by_id(3) is None

    @pytest.mark.asyncio
    async def test_get_latest_on_empty_store_returns_none(self, store):
        assert await store.get_latest() is None

    @pytest.mark.asyncio
    async def test_get_latest_reads_top_of_index(self, store, redis, pipe):
        redis.zrevrange.return_value = [b"2"]
        pipe.execute.return_value = [_doc(2, "newest", 2)]

        latest = await store.get_latest()

        redis.zrevrange.assert_awaited_once_with("test:record:by-created", 0, 0)
        assert latest.message == "newest"

    @pytest.mark.asyncio
    async def test_list_filters_orders_and_pages_client_side(self, store, redis, pipe):
        redis.zrange.return_value = [b"1", b"2", b"3", b"4"]
        pipe.execute.return_value = [
            _doc(1, "Beta", 1),
            _doc(2, "alpha", 2),
            _doc(3, "ALPHA two", 3),
            _doc(4, "gamma", 4),
        ]

        records = await store.list(page=1, page_size=10, order_by="createdAt", descending=True, filter="alpha")

        assert [r.id for r in records] == [3, 2]

    @pytest.mark.asyncio
    async def test_list_skips_documents_that_vanished(self, store, redis, pipe):
        redis.zrange.return_value = [b"1", b"2"]
        pipe.execute.return_value = [None, _doc(2, "kept", 2)]

        records = await store.list_all()

        assert [r.id for r in records] == [2]

    @pytest.mark.asyncio
    async def test_list_out_of_range_paging_does_not_hit_redis(self, store, redis):
        assert await store.list(page=0, page_size=5) == []
        redis.zrange.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connection_failure_maps_to_store_connection_error(self, store, redis):
        redis.get.side_effect = RedisConnectionError("refused")

        with pytest.raises(StoreConnectionError):
            await store.get_by_id(1)

    @pytest.mark.asyncio
    async def test_other_redis_errors_map_to_storage_error(self, store, redis):
        redis.incr.side_effect = ResponseError("WRONGTYPE")

        with pytest.raises(StorageError) as exc_info:
            await store.save(Record(message="hello"))
        assert not isinstance(exc_info.value, StoreConnectionError)

    @pytest.mark.asyncio
    async def test_malformed_document_raises_storage_error(self, store, redis):
        redis.get.return_value = b"{not json"

        with pytest.raises(StorageError):
            await store.get_by_id(1)

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self, store, redis):
        await store.close()
        redis.aclose.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["list", "list_all"])
    async def test_scan_failures_name_the_calling_operation(self, store, redis, operation):
        redis.zrange.side_effect = RedisConnectionError("refused")

        with pytest.raises(StoreConnectionError) as exc_info:
            if operation == "list":
                await store.list(page=1, page_size=10)
            else:
                await store.list_all()

        assert str(exc_info.value).startswith(f"{operation}:")
