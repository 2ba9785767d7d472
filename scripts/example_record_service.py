#!/usr/bin/env python3
"""
Record Service Walkthrough

Demonstrates the full persistence stack: provider selection, read-through
caching, and the timeout/retry/circuit-breaker wrapper.

Usage:
    python scripts/example_record_service.py
    RECORDKEEPER_PROVIDER=sqlite RECORDKEEPER_DATABASE_URL=sqlite:///demo.db \
        python scripts/example_record_service.py

This script:
1. Builds the service from RECORDKEEPER_* environment variables
2. Saves and reads back a few records
3. Shows a paged listing with navigation links
4. Trips the circuit breaker against an unreachable store
"""

import asyncio
import logging
import sys

sys.path.insert(0, ".")

from recordkeeper import (
    CircuitOpenError,
    RecordService,
    ResiliencePolicy,
    ResilientRecordStore,
    RetryExhaustedError,
    StoreConnectionError,
    ValidationError,
    configure_logging,
    create_record_service_from_env,
)
from recordkeeper.storage import InMemoryRecordStore

logger = logging.getLogger(__name__)


class UnreachableStore(InMemoryRecordStore):
    """Every read fails as if the database were down."""

    async def get_latest(self):
        raise StoreConnectionError("connection refused")


async def demo_round_trip(service: RecordService):
    """Save, read back and page through records."""
    logger.info("=" * 60)
    logger.info("Demo: Round Trip")
    logger.info("=" * 60)

    for message in ("hello", "bonjour", "hola", "ciao", "hallo"):
        saved = await service.create(message)
        logger.info(f"Saved record {saved.id}: {saved.message}")

    latest = await service.get_latest()
    logger.info(f"Latest record: {latest.id} ({latest.message})")

    paged = await service.get_paged(page=1, page_size=2, order_by="message")
    logger.info(f"Page 1: {[item.message for item in paged.items]}")
    for link in paged.links:
        logger.info(f"  {link.rel}: {link.href}")

    try:
        await service.create("   ")
    except ValidationError as e:
        logger.info(f"Rejected blank message: {e}")

    logger.info(f"Health: {await service.health()}")


async def demo_circuit_breaker():
    """Show retries, then fast-failing once the circuit opens."""
    logger.info("=" * 60)
    logger.info("Demo: Circuit Breaker")
    logger.info("=" * 60)

    policy = ResiliencePolicy(backoff_base_seconds=0.05, open_seconds=1.0)
    service = RecordService(ResilientRecordStore(UnreachableStore(), policy), provider="demo")

    for attempt in range(1, 4):
        try:
            await service.get_latest()
        except RetryExhaustedError as e:
            logger.info(f"Call {attempt}: gave up after {e.attempts} attempts")
        except CircuitOpenError as e:
            logger.info(f"Call {attempt}: fast-failed ({e})")


async def main():
    configure_logging("INFO")

    service = await create_record_service_from_env()
    try:
        await demo_round_trip(service)
        await demo_circuit_breaker()
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await service.close()


if __name__ == "__main__":
    asyncio.run(main())
