"""
Configuration

Environment-based settings for the whole persistence layer.

Environment variables:
    RECORDKEEPER_PROVIDER: "memory", "sqlite", "postgresql", "mysql", "redis"
    RECORDKEEPER_DATABASE_URL: SQLAlchemy connection URL
    RECORDKEEPER_REDIS_URL: Redis URL for the redis provider
    RECORDKEEPER_POOL_SIZE: Connection pool size
    RECORDKEEPER_POOL_MAX_OVERFLOW: Max pool overflow
    RECORDKEEPER_ECHO_SQL: "true" to log SQL
    RECORDKEEPER_CREATE_TABLES: "false" to disable table creation
    RECORDKEEPER_KEY_PREFIX: Redis key prefix for records
    RECORDKEEPER_CACHE_ENABLED: "false" to bypass the read-through cache
    RECORDKEEPER_CACHE_BACKEND: "memory" or "redis"
    RECORDKEEPER_CACHE_URL: Redis URL for the cache (defaults to REDIS_URL)
    RECORDKEEPER_CACHE_TTL: Cache entry lifetime in seconds
    RECORDKEEPER_TIMEOUT: Per-attempt timeout in seconds
    RECORDKEEPER_RETRY_ATTEMPTS: Total attempts per call
    RECORDKEEPER_RETRY_BACKOFF: Linear backoff step in seconds
    RECORDKEEPER_BREAKER_THRESHOLD: Consecutive failures that open the circuit
    RECORDKEEPER_BREAKER_OPEN: Seconds the circuit stays open
    RECORDKEEPER_LOG_LEVEL: Logging level name
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Mapping, TypeVar

from recordkeeper.cache.ports import DEFAULT_TTL_SECONDS, CacheBackendKind, CacheSettings
from recordkeeper.errors import ConfigurationError
from recordkeeper.resilience.policies import ResiliencePolicy
from recordkeeper.storage.factory import StorageSettings

ENV_PREFIX = "RECORDKEEPER_"

T = TypeVar("T")


@dataclass
class Settings:
    """
    Aggregate configuration.

    Attributes:
        storage: Provider selection and connection settings
        cache: Read-through cache settings
        resilience: Timeout, retry and circuit breaker settings
        log_level: Root logging level
    """
    storage: StorageSettings = field(default_factory=StorageSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    resilience: ResiliencePolicy = field(default_factory=ResiliencePolicy)
    log_level: str = "INFO"


def _parse(env: Mapping[str, str], name: str, default: T, convert: Callable[[str], T]) -> T:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from e


def _flag(raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


def settings_from_env(env: Mapping[str, str] | None = None) -> Settings:
    """
    Create Settings from environment variables.

    The provider name is read as-is; validating it is the store selector's job.

    Args:
        env: Variables to read (defaults to os.environ)

    Raises:
        ConfigurationError: If a numeric or boolean variable is malformed
    """
    env = os.environ if env is None else env

    redis_url = env.get(ENV_PREFIX + "REDIS_URL")
    storage = StorageSettings(
        backend=env.get(ENV_PREFIX + "PROVIDER", "memory"),
        database_url=env.get(ENV_PREFIX + "DATABASE_URL"),
        redis_url=redis_url,
        pool_size=_parse(env, "POOL_SIZE", 5, int),
        pool_max_overflow=_parse(env, "POOL_MAX_OVERFLOW", 10, int),
        echo_sql=_parse(env, "ECHO_SQL", False, _flag),
        create_tables=_parse(env, "CREATE_TABLES", True, _flag),
        key_prefix=env.get(ENV_PREFIX + "KEY_PREFIX", "recordkeeper"),
    )

    cache = CacheSettings(
        enabled=_parse(env, "CACHE_ENABLED", True, _flag),
        backend=_parse(env, "CACHE_BACKEND", CacheBackendKind.MEMORY,
                       lambda v: CacheBackendKind(v.lower())),
        redis_url=env.get(ENV_PREFIX + "CACHE_URL") or redis_url,
        ttl_seconds=_parse(env, "CACHE_TTL", float(DEFAULT_TTL_SECONDS), float),
        key_prefix=f"{storage.key_prefix}:cache",
    )

    resilience = ResiliencePolicy(
        timeout_seconds=_parse(env, "TIMEOUT", 2.0, float),
        max_attempts=_parse(env, "RETRY_ATTEMPTS", 3, int),
        backoff_base_seconds=_parse(env, "RETRY_BACKOFF", 0.2, float),
        failure_threshold=_parse(env, "BREAKER_THRESHOLD", 2, int),
        open_seconds=_parse(env, "BREAKER_OPEN", 10.0, float),
    )

    return Settings(
        storage=storage,
        cache=cache,
        resilience=resilience,
        log_level=env.get(ENV_PREFIX + "LOG_LEVEL", "INFO").upper(),
    )
