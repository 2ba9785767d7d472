"""
SQLAlchemy Models for Record Storage

Async-compatible SQLAlchemy 2.0 ORM model for the records table.

Designed to work with:
- SQLite (via aiosqlite)
- PostgreSQL (via asyncpg)
- MySQL (via aiomysql)
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from recordkeeper.storage.ports import MESSAGE_MAX_LENGTH

# Signed 64-bit ids; SQLite keeps INTEGER so the column stays a rowid alias
RecordId = BigInteger().with_variant(Integer, "sqlite")
MAX_RECORD_ID = 2**63 - 1


# =============================================================================
# Base
# =============================================================================

class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# =============================================================================
# Record Model
# =============================================================================

class RecordModel(Base):
    """
    A persisted message record.

    The id is assigned by the database on insert.
    """
    __tablename__ = "records"

    id: Mapped[int] = mapped_column(RecordId, primary_key=True, autoincrement=True)
    message: Mapped[str] = mapped_column(String(MESSAGE_MAX_LENGTH), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_records_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<RecordModel(id={self.id}, created_at={self.created_at})>"
