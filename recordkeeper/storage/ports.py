"""
Storage Port Interfaces

Abstract base class defining the record store contract.
All persistence APIs are async. No sync DB calls allowed.

These ports follow the hexagonal architecture pattern:
- Service code depends only on this interface
- Adapters (in-memory, SQLAlchemy, Redis) implement it
- Decorators (read-through cache, resilience) implement it too, so any
  component may wrap any other
- Storage is injected via dependency inversion

Thread-safety: All implementations must be safe for concurrent async usage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

MESSAGE_MAX_LENGTH = 200


# =============================================================================
# Record
# =============================================================================

@dataclass
class Record:
    """
    Stored message record.

    id is 0 until the store assigns one. created_at is set by the store
    at write time (UTC).
    """
    message: str
    id: int = 0
    created_at: datetime | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "message": self.message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """
        Deserialize from a dict produced by to_dict().

        Raises:
            KeyError, TypeError, ValueError: If the payload is malformed
        """
        created_at = data["created_at"]
        if not isinstance(data["message"], str) or not isinstance(data["id"], int):
            raise TypeError("record payload has wrong field types")
        return cls(
            id=data["id"],
            message=data["message"],
            created_at=ensure_utc(datetime.fromisoformat(created_at)) if created_at else None,
        )


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordOrder(str, Enum):
    """Sort field for paged listings."""
    MESSAGE = "message"
    CREATED_AT = "created_at"

    @classmethod
    def parse(cls, value: RecordOrder | str | None) -> RecordOrder:
        """
        Resolve a caller-supplied sort field.

        Accepts "message", "createdAt" or "created_at" in any case.
        Anything else sorts by creation time.
        """
        if isinstance(value, RecordOrder):
            return value
        if value and value.strip().lower() == "message":
            return cls.MESSAGE
        return cls.CREATED_AT


def normalize_filter(filter: str | None) -> str | None:
    """Whitespace-only filters mean no filter."""
    if filter is None or not filter.strip():
        return None
    return filter


def page_bounds(page: int, page_size: int) -> tuple[int, int] | None:
    """
    Translate 1-based page coordinates to (offset, limit).

    Returns None when the page cannot contain anything (page < 1 or
    page_size < 1); stores answer such requests with an empty list.
    """
    if page < 1 or page_size < 1:
        return None
    return (page - 1) * page_size, page_size


# =============================================================================
# Record Store
# =============================================================================

class RecordStore(ABC):
    """
    Storage interface for message records.

    Operations are independent; there is no cross-call transaction guarantee.
    """

    @abstractmethod
    async def get_latest(self) -> Record | None:
        """
        Get the most recent record by creation time.

        Returns:
            Latest record or None if the store is empty

        Raises:
            StoreConnectionError: If the store is unreachable
        """
        ...

    @abstractmethod
    async def get_by_id(self, record_id: int) -> Record | None:
        """
        Get a record by identifier.

        Args:
            record_id: Store-assigned identifier

        Returns:
            Record or None if not found
        """
        ...

    @abstractmethod
    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        """
        List records with paging, ordering and filtering.

        Args:
            page: 1-based page number (offset = (page - 1) * page_size)
            page_size: Records per page
            order_by: Sort field (message or created_at)
            descending: Sort direction
            filter: Case-insensitive substring match on message

        Returns:
            The requested page; empty when page < 1 or page_size < 1
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[Record]:
        """
        List every record, newest first.
        """
        ...

    @abstractmethod
    async def save(self, record: Record) -> Record:
        """
        Persist a new record.

        The store assigns id and created_at (UTC now, overriding any
        caller-supplied value). The caller's instance is left untouched.

        Args:
            record: Record to persist

        Returns:
            The completed record

        Raises:
            StorageError: If persisting fails
        """
        ...

    async def initialize(self) -> None:
        """Prepare the backing store (create tables, etc.)."""
        pass

    async def ping(self) -> None:
        """
        Cheap reachability check.

        Raises:
            StoreConnectionError: If the store is unreachable
        """
        pass

    async def close(self) -> None:
        """
        Release connections.

        Called during shutdown.
        """
        pass
