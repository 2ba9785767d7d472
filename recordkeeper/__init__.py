# recordkeeper - Resilient persistence-access layer
# Read-through caching and timeout/retry/circuit-breaker policies over
# pluggable record stores

__version__ = "0.1.0"

# Re-export commonly used components for convenience
from recordkeeper.errors import (
    RecordKeeperError,
    ValidationError,
    ConfigurationError,
    UnsupportedProviderError,
    StorageError,
    StoreConnectionError,
    StoreTimeoutError,
    RetryExhaustedError,
    CircuitOpenError,
    CacheError,
    CacheInvalidationError,
    CacheCorruptionError,
)
from recordkeeper.storage import (
    Record,
    RecordOrder,
    RecordStore,
    StorageBackend,
    StorageSettings,
    select_store,
    create_store,
)
from recordkeeper.cache import CachingRecordStore, CacheSettings
from recordkeeper.resilience import ResilientRecordStore, ResiliencePolicy
from recordkeeper.service import RecordService, PagedRecords
from recordkeeper.config import Settings, settings_from_env
from recordkeeper.bootstrap import (
    build_record_service,
    configure_logging,
    create_record_service_from_env,
)

__all__ = [
    "__version__",
    # Errors
    "RecordKeeperError",
    "ValidationError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "StorageError",
    "StoreConnectionError",
    "StoreTimeoutError",
    "RetryExhaustedError",
    "CircuitOpenError",
    "CacheError",
    "CacheInvalidationError",
    "CacheCorruptionError",
    # Storage
    "Record",
    "RecordOrder",
    "RecordStore",
    "StorageBackend",
    "StorageSettings",
    "select_store",
    "create_store",
    # Decorators
    "CachingRecordStore",
    "CacheSettings",
    "ResilientRecordStore",
    "ResiliencePolicy",
    # Service
    "RecordService",
    "PagedRecords",
    # Wiring
    "Settings",
    "settings_from_env",
    "build_record_service",
    "configure_logging",
    "create_record_service_from_env",
]
