"""
Environment settings and startup wiring tests.
"""

import pytest

from recordkeeper.bootstrap import (
    build_cache_backend,
    build_record_service,
    create_record_service_from_env,
)
from recordkeeper.cache import CacheBackendKind, CacheSettings, InMemoryCacheBackend
from recordkeeper.cache.redis import RedisCacheBackend
from recordkeeper.config import Settings, settings_from_env
from recordkeeper.errors import ConfigurationError, UnsupportedProviderError, ValidationError
from recordkeeper.resilience import ResilientRecordStore
from recordkeeper.storage import StorageSettings


class TestSettingsFromEnv:
    """RECORDKEEPER_* variables."""

    def test_defaults(self):
        settings = settings_from_env({})

        assert settings.storage.backend == "memory"
        assert settings.storage.database_url is None
        assert settings.cache.enabled is True
        assert settings.cache.backend == CacheBackendKind.MEMORY
        assert settings.cache.ttl_seconds == 300
        assert settings.resilience.timeout_seconds == 2.0
        assert settings.resilience.max_attempts == 3
        assert settings.log_level == "INFO"

    def test_overrides(self):
        settings = settings_from_env({
            "RECORDKEEPER_PROVIDER": "sqlite",
            "RECORDKEEPER_DATABASE_URL": "sqlite:///records.db",
            "RECORDKEEPER_POOL_SIZE": "8",
            "RECORDKEEPER_ECHO_SQL": "yes",
            "RECORDKEEPER_CACHE_ENABLED": "false",
            "RECORDKEEPER_CACHE_TTL": "60",
            "RECORDKEEPER_TIMEOUT": "0.5",
            "RECORDKEEPER_RETRY_ATTEMPTS": "5",
            "RECORDKEEPER_BREAKER_OPEN": "30",
            "RECORDKEEPER_LOG_LEVEL": "debug",
        })

        assert settings.storage.backend == "sqlite"
        assert settings.storage.database_url == "sqlite:///records.db"
        assert settings.storage.pool_size == 8
        assert settings.storage.echo_sql is True
        assert settings.cache.enabled is False
        assert settings.cache.ttl_seconds == 60.0
        assert settings.resilience.timeout_seconds == 0.5
        assert settings.resilience.max_attempts == 5
        assert settings.resilience.open_seconds == 30.0
        assert settings.log_level == "DEBUG"

    def test_cache_url_falls_back_to_redis_url(self):
        settings = settings_from_env({
            "RECORDKEEPER_REDIS_URL": "redis://cache:6379/0",
            "RECORDKEEPER_CACHE_BACKEND": "Redis",
            "RECORDKEEPER_KEY_PREFIX": "greetings",
        })

        assert settings.cache.backend == CacheBackendKind.REDIS
        assert settings.cache.redis_url == "redis://cache:6379/0"
        assert settings.cache.key_prefix == "greetings:cache"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("RECORDKEEPER_POOL_SIZE", "many"),
            ("RECORDKEEPER_CACHE_TTL", "soon"),
            ("RECORDKEEPER_CACHE_ENABLED", "maybe"),
            ("RECORDKEEPER_CACHE_BACKEND", "memcached"),
        ],
    )
    def test_malformed_values_raise_configuration_error(self, name, value):
        with pytest.raises(ConfigurationError, match=name):
            settings_from_env({name: value})

    def test_out_of_range_resilience_values_raise_configuration_error(self):
        with pytest.raises(ConfigurationError):
            settings_from_env({"RECORDKEEPER_RETRY_ATTEMPTS": "0"})


class TestBuildCacheBackend:
    """Cache backend selection."""

    def test_memory_by_default(self):
        assert isinstance(build_cache_backend(CacheSettings()), InMemoryCacheBackend)

    def test_redis(self):
        settings = CacheSettings(backend=CacheBackendKind.REDIS, redis_url="redis://localhost:6379/0")
        assert isinstance(build_cache_backend(settings), RedisCacheBackend)

    def test_redis_without_url_raises_validation_error(self):
        with pytest.raises(ValidationError):
            build_cache_backend(CacheSettings(backend=CacheBackendKind.REDIS))


class TestBuildRecordService:
    """Full stack composition."""

    @pytest.mark.asyncio
    async def test_memory_stack_round_trips(self):
        service = await build_record_service(Settings())
        try:
            saved = await service.create("hello")
            assert (await service.get_by_id(saved.id)).message == "hello"
            assert (await service.get_latest()).id == saved.id
            assert isinstance(service.store, ResilientRecordStore)
            assert (await service.health())["provider"] == "memory"
        finally:
            await service.close()

    @pytest.mark.asyncio
    async def test_sqlite_stack_without_cache(self, tmp_path):
        settings = Settings(
            storage=StorageSettings(
                backend="sqlite",
                database_url=f"sqlite:///{tmp_path / 'records.db'}",
            ),
            cache=CacheSettings(enabled=False),
        )
        service = await build_record_service(settings)
        try:
            await service.create("one")
            await service.create("two")
            assert [r.message for r in await service.list_all()] == ["two", "one"]
            assert (await service.health())["status"] == "healthy"
        finally:
            await service.close()

    @pytest.mark.asyncio
    async def test_unknown_provider_fails_at_startup(self):
        settings = Settings(storage=StorageSettings(backend="mongodb"))

        with pytest.raises(UnsupportedProviderError):
            await build_record_service(settings)

    @pytest.mark.asyncio
    async def test_sql_provider_without_url_fails_at_startup(self):
        settings = Settings(storage=StorageSettings(backend="postgresql"))

        with pytest.raises(ValidationError):
            await build_record_service(settings)

    @pytest.mark.asyncio
    async def test_from_env_reads_dotenv_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        # Record the current state so variables loaded from .env are undone
        for name in ("RECORDKEEPER_PROVIDER", "RECORDKEEPER_DATABASE_URL"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        (tmp_path / ".env").write_text(
            "RECORDKEEPER_PROVIDER=sqlite\n"
            f"RECORDKEEPER_DATABASE_URL=sqlite:///{tmp_path / 'env.db'}\n"
        )

        service = await create_record_service_from_env()
        try:
            assert (await service.health())["provider"] == "sqlite"
        finally:
            await service.close()
