"""
Redis Cache Backend

Shared cache entries in Redis with native key expiry (SET ... PX).
Suitable when several processes should see the same cached reads; there is
no cross-process invalidation protocol beyond deleting the keys.
"""

from __future__ import annotations

from redis.asyncio import Redis

from recordkeeper.cache.ports import CacheBackend
from recordkeeper.errors import ValidationError


class RedisCacheBackend(CacheBackend):
    """
    Redis-based cache backend.

    Key pattern: {prefix}:{cache key}
    """

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "recordkeeper:cache",
        owns_client: bool = False,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis: Redis async client
            key_prefix: Prefix for all keys
            owns_client: Whether close() should close the client
        """
        self._redis = redis
        self._prefix = key_prefix
        self._owns_client = owns_client

    @classmethod
    def from_url(cls, redis_url: str | None, key_prefix: str = "recordkeeper:cache") -> RedisCacheBackend:
        """
        Raises:
            ValidationError: If redis_url is missing
        """
        if not redis_url or not redis_url.strip():
            raise ValidationError("redis_url is required for the Redis cache backend")
        client = Redis.from_url(redis_url.strip(), decode_responses=False)
        return cls(client, key_prefix=key_prefix, owns_client=True)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> str | None:
        data = await self._redis.get(self._key(key))
        if data is None:
            return None
        return data.decode() if isinstance(data, bytes) else data

    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        await self._redis.set(self._key(key), value, px=max(int(ttl_seconds * 1000), 1))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._redis.delete(*(self._key(k) for k in keys)))

    async def close(self) -> None:
        if self._owns_client:
            await self._redis.aclose()
