"""
Circuit Breaker

Stops forwarding calls to a failing store for a cooldown period.

States:
- closed: calls pass through; consecutive failures are counted
- open: calls fail immediately with CircuitOpenError
- half_open: the cooldown elapsed; exactly one trial call is admitted.
  Success closes the circuit, failure reopens it.

State is process-local and lives as long as the breaker instance.
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from recordkeeper.errors import CacheError, CircuitOpenError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


def counts_as_failure(error: BaseException) -> bool:
    """Caller mistakes, cache faults and our own fast-fails say nothing about store health."""
    if not isinstance(error, Exception):
        return False
    return not isinstance(error, (ValidationError, CircuitOpenError, CacheError))


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker for async calls.

    All state transitions happen under an asyncio.Lock, so concurrent
    callers cannot corrupt the failure counter.
    """

    def __init__(
        self,
        name: str = "records",
        failure_threshold: int = 2,
        open_seconds: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            name: Identifier for logs and errors
            failure_threshold: Consecutive failures that open the circuit
            open_seconds: Cooldown before a trial call is admitted
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.open_seconds = open_seconds
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._open_until = 0.0
        self._trial_in_flight = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Execute func with circuit breaker protection.

        Raises:
            CircuitOpenError: If the circuit is open (func is not invoked)
        """
        await self._admit()

        try:
            result = await func()
        except BaseException as e:
            if counts_as_failure(e):
                await self._record_failure()
            else:
                await self._release_trial()
            raise

        await self._record_success()
        return result

    async def _admit(self) -> None:
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return

            now = self._clock()
            if self._state == CircuitState.OPEN:
                if now < self._open_until:
                    raise CircuitOpenError(self.name, self._open_until - now)
                self._state = CircuitState.HALF_OPEN
                self._trial_in_flight = True
                logger.info(f"Circuit '{self.name}' half-open, admitting trial call")
                return

            # Half-open: only the single trial call may proceed
            if self._trial_in_flight:
                raise CircuitOpenError(self.name, 0.0)
            self._trial_in_flight = True

    async def _record_success(self) -> None:
        async with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"Circuit '{self.name}' closed after successful trial call")
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._trial_in_flight = False

    async def _record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._trial_in_flight = False

            if (
                self._state == CircuitState.HALF_OPEN
                or self._failure_count >= self.failure_threshold
            ):
                self._state = CircuitState.OPEN
                self._open_until = self._clock() + self.open_seconds
                logger.warning(
                    f"Circuit '{self.name}' opened for {self.open_seconds:g}s "
                    f"after {self._failure_count} consecutive failures"
                )

    async def _release_trial(self) -> None:
        async with self._lock:
            self._trial_in_flight = False

    def get_state(self) -> dict[str, Any]:
        """Snapshot for diagnostics."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self.failure_threshold,
            "open_seconds": self.open_seconds,
        }
