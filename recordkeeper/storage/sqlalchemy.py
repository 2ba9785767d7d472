"""
SQLAlchemy Storage Adapter

Async SQLAlchemy 2.0 implementation for relational persistence.
Uses async engine and session for all operations.

Compatible with:
- SQLite (aiosqlite)
- PostgreSQL (asyncpg)
- MySQL (aiomysql)

All operations are async. No sync DB calls.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import func, select, text
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from recordkeeper.errors import StorageError, StoreConnectionError, ValidationError
from recordkeeper.storage.models import MAX_RECORD_ID, Base, RecordModel
from recordkeeper.storage.ports import (
    Record,
    RecordOrder,
    RecordStore,
    ensure_utc,
    normalize_filter,
    page_bounds,
    utcnow,
)

logger = logging.getLogger(__name__)

# Sync driver scheme -> async driver scheme
_ASYNC_DRIVERS = {
    "sqlite://": "sqlite+aiosqlite://",
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
    "mysql://": "mysql+aiomysql://",
}


# =============================================================================
# Converters
# =============================================================================

def record_model_to_record(model: RecordModel) -> Record:
    """Convert SQLAlchemy model to port record."""
    return Record(
        id=model.id,
        message=model.message,
        created_at=ensure_utc(model.created_at),
    )


def to_async_url(url: str) -> str:
    """Ensure the URL names an async driver."""
    for sync_scheme, async_scheme in _ASYNC_DRIVERS.items():
        if url.startswith(sync_scheme):
            return async_scheme + url[len(sync_scheme):]
    return url


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Map driver exceptions onto the storage error taxonomy."""
    try:
        yield
    except (OperationalError, InterfaceError, DisconnectionError, OSError) as e:
        raise StoreConnectionError(f"{operation}: database unreachable: {e}") from e
    except SQLAlchemyError as e:
        raise StorageError(f"{operation}: {e}") from e


# =============================================================================
# SQLAlchemy Record Store
# =============================================================================

class SqlAlchemyRecordStore(RecordStore):
    """
    SQLAlchemy implementation of record storage.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
        create_tables: bool = True,
    ):
        """
        Initialize the store.

        Args:
            session_factory: Async session factory bound to an engine
            engine: Engine owned by this store (disposed on close)
            create_tables: Whether initialize() creates the schema

        Raises:
            ValidationError: If no session factory is given
        """
        if session_factory is None:
            raise ValidationError("session_factory is required for SqlAlchemyRecordStore")
        self._session_factory = session_factory
        self._engine = engine
        self._create_tables = create_tables

    @classmethod
    def from_url(
        cls,
        database_url: str | None,
        pool_size: int = 5,
        max_overflow: int = 10,
        echo: bool = False,
        create_tables: bool = True,
    ) -> SqlAlchemyRecordStore:
        """
        Build a store with its own engine.

        Args:
            database_url: SQLAlchemy connection URL (sync schemes are upgraded
                to their async driver)
            pool_size: Connection pool size (ignored for SQLite)
            max_overflow: Max overflow for connection pool (ignored for SQLite)
            echo: Whether to log SQL queries
            create_tables: Whether initialize() creates the schema

        Raises:
            ValidationError: If database_url is missing
        """
        if not database_url or not database_url.strip():
            raise ValidationError("database_url is required for SQL storage")

        url = to_async_url(database_url.strip())
        engine_kwargs: dict = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow)

        engine = create_async_engine(url, **engine_kwargs)
        session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return cls(session_factory, engine=engine, create_tables=create_tables)

    async def initialize(self) -> None:
        if not (self._create_tables and self._engine):
            return
        with _translate_errors("initialize"):
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Record tables ready")

    async def get_latest(self) -> Record | None:
        with _translate_errors("get_latest"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(RecordModel)
                    .order_by(RecordModel.created_at.desc(), RecordModel.id.desc())
                    .limit(1)
                )
                model = result.scalar_one_or_none()
                return record_model_to_record(model) if model else None

    async def get_by_id(self, record_id: int) -> Record | None:
        # Ids outside the 64-bit column range cannot match
        if not 0 < record_id <= MAX_RECORD_ID:
            return None
        with _translate_errors("get_by_id"):
            async with self._session_factory() as session:
                model = await session.get(RecordModel, record_id)
                return record_model_to_record(model) if model else None

    async def list(
        self,
        page: int,
        page_size: int,
        order_by: RecordOrder | str = RecordOrder.CREATED_AT,
        descending: bool = False,
        filter: str | None = None,
    ) -> list[Record]:
        bounds = page_bounds(page, page_size)
        if bounds is None:
            return []
        offset, limit = bounds

        column = (
            RecordModel.message
            if RecordOrder.parse(order_by) == RecordOrder.MESSAGE
            else RecordModel.created_at
        )
        if descending:
            ordering = (column.desc(), RecordModel.id.desc())
        else:
            ordering = (column.asc(), RecordModel.id.asc())

        query = select(RecordModel)
        needle = normalize_filter(filter)
        if needle is not None:
            query = query.where(
                func.lower(RecordModel.message).contains(needle.lower(), autoescape=True)
            )
        query = query.order_by(*ordering).offset(offset).limit(limit)

        with _translate_errors("list"):
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [record_model_to_record(m) for m in result.scalars().all()]

    async def list_all(self) -> list[Record]:
        with _translate_errors("list_all"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(RecordModel).order_by(
                        RecordModel.created_at.desc(), RecordModel.id.desc()
                    )
                )
                return [record_model_to_record(m) for m in result.scalars().all()]

    async def save(self, record: Record) -> Record:
        with _translate_errors("save"):
            async with self._session_factory() as session:
                async with session.begin():
                    model = RecordModel(message=record.message, created_at=utcnow())
                    session.add(model)
                    await session.flush()
                    saved = record_model_to_record(model)
        logger.debug(f"Inserted record {saved.id}")
        return saved

    async def ping(self) -> None:
        with _translate_errors("ping"):
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
