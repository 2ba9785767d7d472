# Resilience
# Timeout, bounded retry and circuit breaking for record stores

from .policies import (
    ResiliencePolicy,
    is_retryable,
    run_with_retry,
    run_with_timeout,
)
from .circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    counts_as_failure,
)
from .store import ResilientRecordStore

__all__ = [
    "ResiliencePolicy",
    "is_retryable",
    "run_with_retry",
    "run_with_timeout",
    "CircuitBreaker",
    "CircuitState",
    "counts_as_failure",
    "ResilientRecordStore",
]
