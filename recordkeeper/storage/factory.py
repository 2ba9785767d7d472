"""
Storage Factory

Configuration-based selection of the record store adapter.
The provider set is closed: each StorageBackend member maps to exactly one
constructor function, and only those providers can be selected.

Supported backends:
- memory: In-memory storage (development/testing)
- sqlite: SQLite with aiosqlite (single-node production)
- postgresql: PostgreSQL with asyncpg (distributed production)
- mysql: MySQL with aiomysql (distributed production)
- redis: Redis JSON documents (document store)

Usage:
    # From settings
    settings = StorageSettings(backend="sqlite", database_url="sqlite:///records.db")
    store = await create_store(settings)

    # Selection only (no table creation)
    store = select_store("memory", StorageSettings())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from recordkeeper.errors import ConfigurationError, UnsupportedProviderError
from recordkeeper.storage.memory import InMemoryRecordStore
from recordkeeper.storage.ports import RecordStore

logger = logging.getLogger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    REDIS = "redis"


@dataclass
class StorageSettings:
    """
    Configuration for the storage layer.

    Attributes:
        backend: Provider name (one of StorageBackend); validated at selection
        database_url: SQLAlchemy connection URL (for SQL backends)
        redis_url: Redis connection URL (for the redis backend)
        pool_size: Connection pool size for SQL
        pool_max_overflow: Max overflow for connection pool
        echo_sql: Whether to log SQL queries
        create_tables: Whether to auto-create tables on startup
        key_prefix: Prefix for Redis keys (multi-tenant isolation)
    """
    backend: StorageBackend | str | None = StorageBackend.MEMORY
    database_url: str | None = None
    redis_url: str | None = None
    pool_size: int = 5
    pool_max_overflow: int = 10
    echo_sql: bool = False
    create_tables: bool = True
    key_prefix: str = "recordkeeper"


# =============================================================================
# Provider Registry
# =============================================================================

def _create_memory(settings: StorageSettings) -> RecordStore:
    return InMemoryRecordStore()


def _create_sql(settings: StorageSettings) -> RecordStore:
    from recordkeeper.storage.sqlalchemy import SqlAlchemyRecordStore

    return SqlAlchemyRecordStore.from_url(
        settings.database_url,
        pool_size=settings.pool_size,
        max_overflow=settings.pool_max_overflow,
        echo=settings.echo_sql,
        create_tables=settings.create_tables,
    )


def _create_redis(settings: StorageSettings) -> RecordStore:
    from recordkeeper.storage.redis import RedisRecordStore

    return RedisRecordStore.from_url(settings.redis_url, key_prefix=settings.key_prefix)


_PROVIDERS: dict[StorageBackend, Callable[[StorageSettings], RecordStore]] = {
    StorageBackend.MEMORY: _create_memory,
    StorageBackend.SQLITE: _create_sql,
    StorageBackend.POSTGRESQL: _create_sql,
    StorageBackend.MYSQL: _create_sql,
    StorageBackend.REDIS: _create_redis,
}


def supported_providers() -> list[str]:
    """Names accepted by select_store()."""
    return [backend.value for backend in StorageBackend]


def resolve_backend(provider: StorageBackend | str | None) -> StorageBackend:
    """
    Resolve a provider name to a backend.

    Raises:
        ConfigurationError: If provider is missing or blank
        UnsupportedProviderError: If provider is not a supported backend
    """
    if isinstance(provider, StorageBackend):
        return provider
    if provider is None or not str(provider).strip():
        raise ConfigurationError("Storage provider must be specified")

    name = str(provider).strip().lower()
    try:
        return StorageBackend(name)
    except ValueError:
        raise UnsupportedProviderError(str(provider), supported_providers()) from None


def select_store(
    provider: StorageBackend | str | None,
    settings: StorageSettings,
) -> RecordStore:
    """
    Choose and construct the record store adapter for a provider.

    Args:
        provider: Provider name
        settings: Connection settings handed to the adapter constructor

    Returns:
        Constructed (not yet initialized) RecordStore

    Raises:
        ConfigurationError: If provider is missing or blank
        UnsupportedProviderError: If provider is not a supported backend
        ValidationError: If the adapter's connection descriptor is missing
    """
    backend = resolve_backend(provider)
    store = _PROVIDERS[backend](settings)
    logger.info(f"Selected {backend.value} record store ({type(store).__name__})")
    return store


async def create_store(settings: StorageSettings) -> RecordStore:
    """
    Select the adapter named by settings.backend and initialize it.

    Args:
        settings: Storage configuration

    Returns:
        Ready-to-use RecordStore
    """
    store = select_store(settings.backend, settings)
    await store.initialize()
    return store
