"""
Record Service

The external-facing contract of the persistence layer.

Responsibilities:
- Validate caller input before any store call
- Delegate to the (cached, resilient) record store
- Log outcomes and failures; failures are re-raised unchanged
- Shape paged results for the HTTP layer
"""

from __future__ import annotations

import logging
from typing import Any

from recordkeeper.errors import ValidationError
from recordkeeper.service.links import DEFAULT_BASE_PATH, build_links
from recordkeeper.service.schemas import PagedRecords, RecordView
from recordkeeper.storage.ports import (
    MESSAGE_MAX_LENGTH,
    Record,
    RecordOrder,
    RecordStore,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Validation
# =============================================================================

def validate_id(record_id: Any) -> None:
    """Identifiers are positive integers."""
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
        raise ValidationError("identifier must be greater than zero")


def validate_record(record: Record | None) -> None:
    """
    A record to persist must exist and carry a usable message.

    Raises:
        ValidationError: On the first rule that fails
    """
    if record is None:
        raise ValidationError("record must not be None")
    message = record.message
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("message must not be empty")
    if len(message) > MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"message must not exceed {MESSAGE_MAX_LENGTH} characters"
        )


# =============================================================================
# Record Service
# =============================================================================

class RecordService:
    """
    Orchestrates record reads and writes.

    Validation failures are raised before the store is touched. Store
    failures are logged and re-raised; nothing is swallowed.
    """

    def __init__(
        self,
        store: RecordStore,
        provider: str = "unknown",
        base_path: str = DEFAULT_BASE_PATH,
    ):
        """
        Args:
            store: Fully composed record store
            provider: Provider name reported by health()
            base_path: Path prefix for paging links
        """
        self._store = store
        self._provider = provider
        self._base_path = base_path

    @property
    def store(self) -> RecordStore:
        return self._store

    async def get_latest(self) -> Record | None:
        """Return the most recent record, or None if there are none."""
        try:
            result = await self._store.get_latest()
        except Exception:
            logger.error("Failed to fetch latest record", exc_info=True)
            raise
        logger.info(f"Latest record fetched: {result.id if result else None}")
        return result

    async def get_by_id(self, record_id: int) -> Record | None:
        """
        Return a record by id, or None if it does not exist.

        Raises:
            ValidationError: If record_id is not a positive integer
        """
        validate_id(record_id)
        try:
            result = await self._store.get_by_id(record_id)
        except Exception:
            logger.error(f"Failed to fetch record {record_id}", exc_info=True)
            raise
        logger.info(f"Record {record_id} {'found' if result else 'not found'}")
        return result

    async def save(self, record: Record | None) -> Record:
        """
        Validate and persist a new record.

        Returns:
            The stored record with id and created_at assigned

        Raises:
            ValidationError: If the record or its message is invalid, or the
                store failed to assign a positive id
        """
        validate_record(record)
        try:
            saved = await self._store.save(record)
            validate_id(saved.id)
        except Exception:
            logger.error("Failed to save record", exc_info=True)
            raise
        logger.info(f"Record {saved.id} saved")
        return saved

    async def create(self, message: str) -> Record:
        """Persist a new record with the given message."""
        return await self.save(Record(message=message))

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        """
        Return one page of records.

        Out-of-range paging (page < 1, page_size < 1) yields an empty list.
        """
        try:
            records = await self._store.list(page, page_size, order_by, descending, filter)
        except Exception:
            logger.error("Failed to list records", exc_info=True)
            raise
        logger.info(f"Listed {len(records)} records (page={page}, page_size={page_size})")
        return records

    async def get_paged(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> PagedRecords:
        """Return one page of records with navigation links."""
        records = await self.list(page, page_size, order_by, descending, filter)
        total_items = len(records)
        return PagedRecords(
            items=[RecordView.from_record(r) for r in records],
            page=page,
            page_size=page_size,
            total_items=total_items,
            links=build_links(page, page_size, total_items, self._base_path),
        )

    async def list_all(self) -> list[Record]:
        """Return every record, newest first."""
        try:
            records = await self._store.list_all()
        except Exception:
            logger.error("Failed to list all records", exc_info=True)
            raise
        logger.info(f"Listed all records: {len(records)}")
        return records

    async def health(self) -> dict[str, Any]:
        """
        Check that the underlying store is reachable.

        Never raises; failures are reported in the result.
        """
        try:
            await self._store.ping()
        except Exception as e:
            logger.warning(f"Health check failed for {self._provider}: {e}")
            return {"provider": self._provider, "status": "unhealthy", "error": str(e)}
        return {"provider": self._provider, "status": "healthy", "error": None}

    async def close(self) -> None:
        """Close the store chain."""
        await self._store.close()
