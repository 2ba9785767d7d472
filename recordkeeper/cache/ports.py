"""
Cache Port Interfaces

Abstract base class for the key/value backends behind the read-through cache.
Values are opaque strings (serialized records); every entry carries an
absolute time-to-live fixed at write time.

Thread-safety: All implementations must be safe for concurrent async usage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

DEFAULT_TTL_SECONDS = 300  # 5 minutes


class CacheBackendKind(str, Enum):
    """Supported cache backends."""
    MEMORY = "memory"
    REDIS = "redis"


@dataclass
class CacheSettings:
    """
    Configuration for the read-through cache.

    Attributes:
        enabled: Whether reads go through the cache at all
        backend: Cache backend type
        redis_url: Redis connection URL (for the redis backend)
        ttl_seconds: Absolute lifetime of each entry
        key_prefix: Prefix for Redis keys
    """
    enabled: bool = True
    backend: CacheBackendKind = CacheBackendKind.MEMORY
    redis_url: str | None = None
    ttl_seconds: float = DEFAULT_TTL_SECONDS
    key_prefix: str = "recordkeeper:cache"


class CacheBackend(ABC):
    """
    Storage interface for cache entries.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Get an unexpired entry.

        Returns:
            Stored value, or None if absent or expired
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: float) -> None:
        """
        Store an entry that expires ttl_seconds from now.
        """
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """
        Remove entries.

        Returns:
            Number of entries removed
        """
        ...

    async def close(self) -> None:
        """Release connections."""
        pass
