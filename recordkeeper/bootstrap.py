"""
Startup Wiring

Composes the persistence stack once at process start:

    RecordService -> ResilientRecordStore -> CachingRecordStore -> adapter

Every component receives its collaborators here; nothing is global.

Usage:
    configure_logging("INFO")
    service = await create_record_service_from_env()
    record = await service.create("hello")
    await service.close()
"""

from __future__ import annotations

import logging

from dotenv import find_dotenv, load_dotenv

from recordkeeper.cache import (
    CacheBackend,
    CacheBackendKind,
    CacheSettings,
    CachingRecordStore,
    InMemoryCacheBackend,
)
from recordkeeper.config import Settings, settings_from_env
from recordkeeper.resilience import ResilientRecordStore
from recordkeeper.service import RecordService
from recordkeeper.storage import RecordStore, create_store, resolve_backend

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the process."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def build_cache_backend(settings: CacheSettings) -> CacheBackend:
    """
    Create the cache backend named by settings.backend.

    Raises:
        ValidationError: If the redis backend has no URL
    """
    if settings.backend == CacheBackendKind.REDIS:
        from recordkeeper.cache.redis import RedisCacheBackend

        logger.info("Using Redis cache backend")
        return RedisCacheBackend.from_url(settings.redis_url, key_prefix=settings.key_prefix)

    logger.info("Using in-memory cache backend")
    return InMemoryCacheBackend()


async def build_record_service(settings: Settings) -> RecordService:
    """
    Build the full service stack from settings.

    Raises:
        ConfigurationError: If the provider is missing
        UnsupportedProviderError: If the provider is unknown
        ValidationError: If the provider's connection descriptor is missing
    """
    backend = resolve_backend(settings.storage.backend)
    store: RecordStore = await create_store(settings.storage)

    if settings.cache.enabled:
        store = CachingRecordStore(
            store,
            build_cache_backend(settings.cache),
            ttl_seconds=settings.cache.ttl_seconds,
        )

    store = ResilientRecordStore(store, settings.resilience, name=backend.value)

    logger.info(
        f"Record service ready (provider={backend.value}, "
        f"cache={'on' if settings.cache.enabled else 'off'}, "
        f"timeout={settings.resilience.timeout_seconds:g}s, "
        f"attempts={settings.resilience.max_attempts})"
    )
    return RecordService(store, provider=backend.value)


async def create_record_service_from_env() -> RecordService:
    """
    Build the service stack from environment variables.

    Convenience function that combines settings_from_env() and
    build_record_service(). Also loads a .env file found from the working
    directory upward, and configures logging.
    """
    load_dotenv(find_dotenv(usecwd=True))
    settings = settings_from_env()
    configure_logging(settings.log_level)
    return await build_record_service(settings)
