# Read-Through Cache
# Transparent caching for any RecordStore
#
# This module provides:
# - CacheBackend port with in-memory and Redis implementations
# - CachingRecordStore decorator (read-through, invalidate on save)

from .ports import (
    DEFAULT_TTL_SECONDS,
    CacheBackend,
    CacheBackendKind,
    CacheSettings,
)
from .memory import InMemoryCacheBackend
from .store import (
    ALL_KEY,
    LATEST_KEY,
    CachingRecordStore,
    by_id_key,
    list_key,
)

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "CacheBackend",
    "CacheBackendKind",
    "CacheSettings",
    "InMemoryCacheBackend",
    "ALL_KEY",
    "LATEST_KEY",
    "CachingRecordStore",
    "by_id_key",
    "list_key",
]
