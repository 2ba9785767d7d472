"""
Resilient Record Store

Decorator that applies the resilience policies to every operation of the
wrapped RecordStore:

    circuit breaker( retry( timeout( inner call ) ) )

- timeout bounds each individual attempt
- retry re-runs timed-out or failed attempts with linear backoff
- the circuit breaker counts failed logical calls (after retries) and
  fast-fails while open

Lifecycle methods (initialize, ping, close) bypass the policies.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, TypeVar

from recordkeeper.resilience.circuit_breaker import CircuitBreaker, CircuitState
from recordkeeper.resilience.policies import ResiliencePolicy, Sleep, run_with_retry
from recordkeeper.storage.ports import Record, RecordOrder, RecordStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResilientRecordStore(RecordStore):
    """
    Timeout, retry and circuit breaking around any RecordStore.
    """

    def __init__(
        self,
        inner: RecordStore,
        policy: ResiliencePolicy | None = None,
        name: str = "records",
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Args:
            inner: Store to protect
            policy: Timeout, retry and breaker settings (defaults if omitted)
            name: Circuit name for logs and errors
            clock: Monotonic time source for the breaker
            sleep: Awaitable delay used between retries
        """
        self._inner = inner
        self._policy = policy or ResiliencePolicy()
        self._sleep = sleep
        self._breaker = CircuitBreaker(
            name=name,
            failure_threshold=self._policy.failure_threshold,
            open_seconds=self._policy.open_seconds,
            clock=clock,
        )

    @property
    def policy(self) -> ResiliencePolicy:
        return self._policy

    @property
    def circuit_state(self) -> CircuitState:
        return self._breaker.state

    async def _execute(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        return await self._breaker.call(
            lambda: run_with_retry(operation, call, self._policy, self._sleep)
        )

    async def get_latest(self) -> Record | None:
        return await self._execute("get_latest", self._inner.get_latest)

    async def get_by_id(self, record_id: int) -> Record | None:
        return await self._execute(
            "get_by_id", lambda: self._inner.get_by_id(record_id)
        )

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        return await self._execute(
            "list",
            lambda: self._inner.list(page, page_size, order_by, descending, filter),
        )

    async def list_all(self) -> list[Record]:
        return await self._execute("list_all", self._inner.list_all)

    async def save(self, record: Record) -> Record:
        return await self._execute("save", lambda: self._inner.save(record))

    async def initialize(self) -> None:
        await self._inner.initialize()

    async def ping(self) -> None:
        await self._inner.ping()

    async def close(self) -> None:
        await self._inner.close()
