"""
Resilience Policies

Timeout and retry-with-backoff for async store calls.

Backoff is linear: the wait before retry n is base * n, so with the
defaults (3 attempts, 0.2s base) a failing call waits 0.2s, then 0.4s,
before giving up.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from recordkeeper.errors import (
    ConfigurationError,
    RecordKeeperError,
    RetryExhaustedError,
    StoreTimeoutError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class ResiliencePolicy:
    """
    Configuration for the resilience wrapper.

    Attributes:
        timeout_seconds: Budget for a single attempt
        max_attempts: Total attempts including the first
        backoff_base_seconds: Linear backoff step between attempts
        failure_threshold: Consecutive failed calls that open the circuit
        open_seconds: How long the circuit stays open before a trial call
    """
    timeout_seconds: float = 2.0
    max_attempts: int = 3
    backoff_base_seconds: float = 0.2
    failure_threshold: int = 2
    open_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be at least 1")
        if self.failure_threshold < 1:
            raise ConfigurationError("failure_threshold must be at least 1")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")
        if self.backoff_base_seconds < 0 or self.open_seconds < 0:
            raise ConfigurationError("backoff and open durations cannot be negative")

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the retry that follows the given attempt number."""
        return self.backoff_base_seconds * attempt


def is_retryable(error: BaseException) -> bool:
    """
    Whether a failed attempt may be retried.

    Errors from our own taxonomy declare it; anything else (driver errors,
    OS errors) is treated as transient.
    """
    if isinstance(error, RecordKeeperError):
        return error.retryable
    return isinstance(error, Exception)


async def run_with_timeout(
    operation: str,
    call: Callable[[], Awaitable[T]],
    timeout_seconds: float,
) -> T:
    """
    Run one attempt under a time budget.

    The attempt is cancelled when the budget runs out, which unwinds its
    sessions and connections.

    Raises:
        StoreTimeoutError: If the attempt exceeded timeout_seconds
    """
    try:
        return await asyncio.wait_for(call(), timeout=timeout_seconds)
    except StoreTimeoutError:
        raise
    except asyncio.TimeoutError as e:
        raise StoreTimeoutError(operation, timeout_seconds) from e


async def run_with_retry(
    operation: str,
    call: Callable[[], Awaitable[T]],
    policy: ResiliencePolicy,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """
    Run a call with per-attempt timeout and bounded retries.

    Args:
        operation: Name used in logs and errors
        call: Zero-argument coroutine factory; invoked once per attempt
        policy: Attempt budget, timeout and backoff
        sleep: Awaitable delay (injectable for tests)

    Returns:
        The first successful result

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error
        Exception: Non-retryable errors propagate on first occurrence
    """
    last_error: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = await run_with_timeout(operation, call, policy.timeout_seconds)
            if attempt > 1:
                logger.info(f"{operation} succeeded on attempt {attempt}")
            return result
        except Exception as e:
            if not is_retryable(e):
                raise
            last_error = e

            if attempt == policy.max_attempts:
                break

            delay = policy.backoff_delay(attempt)
            logger.warning(
                f"{operation} attempt {attempt}/{policy.max_attempts} failed "
                f"({type(e).__name__}: {e}); retrying in {delay:.2f}s"
            )
            await sleep(delay)

    assert last_error is not None
    logger.error(f"{operation} failed after {policy.max_attempts} attempts: {last_error}")
    raise RetryExhaustedError(operation, policy.max_attempts, last_error) from last_error
