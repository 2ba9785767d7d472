"""
Error Taxonomy

Exceptions raised across the persistence-access layer.

Classification drives the resilience wrapper:
- retryable = True: transient store failures (connection, timeout, engine errors)
- retryable = False: caller mistakes, configuration faults, fast-fail signals

Not-found is never an exception; stores return None or an empty list.
"""

from __future__ import annotations


class RecordKeeperError(Exception):
    """Base exception for the record keeper."""
    retryable: bool = False


class ValidationError(RecordKeeperError):
    """Bad caller input or missing construction parameters. Never retried."""
    pass


class ConfigurationError(RecordKeeperError):
    """Bad or missing provider setup. Fatal at startup."""
    pass


class UnsupportedProviderError(ConfigurationError):
    """Provider name outside the supported set."""

    def __init__(self, provider: str, supported: list[str]):
        self.provider = provider
        self.supported = supported
        super().__init__(
            f"Unsupported storage provider: {provider!r}. "
            f"Valid options: {', '.join(supported)}"
        )


class StorageError(RecordKeeperError):
    """Base exception for store failures."""
    retryable = True


class StoreConnectionError(StorageError, ConnectionError):
    """The underlying store is unreachable."""
    pass


class StoreTimeoutError(StorageError, TimeoutError):
    """A store call exceeded its time budget."""

    def __init__(self, operation: str, timeout_seconds: float):
        self.operation = operation
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{operation} timed out after {timeout_seconds:g}s")


class RetryExhaustedError(StorageError):
    """All retry attempts failed; wraps the last underlying error."""
    retryable = False

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempts: {last_error}"
        )


class CircuitOpenError(RecordKeeperError):
    """The circuit breaker is open; the call was not attempted."""

    def __init__(self, name: str, retry_after_seconds: float):
        self.name = name
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            f"Circuit '{name}' is open; retry in {max(retry_after_seconds, 0.0):.1f}s"
        )


class CacheError(RecordKeeperError):
    """Base exception for cache failures."""
    pass


class CacheInvalidationError(CacheError):
    """
    Cache entries could not be dropped after a committed write.

    The write itself succeeded; record holds what was stored. Never retried,
    so a committed save is not repeated.
    """

    def __init__(self, record, keys: tuple[str, ...], cause: BaseException):
        self.record = record
        self.keys = keys
        super().__init__(
            f"Record {record.id} was saved but cache keys "
            f"{', '.join(keys)} could not be invalidated: {cause}"
        )


class CacheCorruptionError(CacheError):
    """A cached payload could not be deserialized."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Corrupt cache entry {key!r}: {reason}")
