"""
Result Models

Caller-facing shapes for records and paged listings.
Serialized with camelCase field names (createdAt, pageSize, totalItems) for
the HTTP layer; Python code uses the snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from recordkeeper.storage.ports import Record


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecordView(_CamelModel):
    """A persisted record as returned to callers."""
    id: int
    message: str
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: Record) -> RecordView:
        return cls(id=record.id, message=record.message, created_at=record.created_at)


class Link(_CamelModel):
    """Hypermedia link for paged navigation."""
    rel: str
    href: str


class PagedRecords(_CamelModel):
    """
    One page of records plus navigation links.

    total_items counts the records on this page.
    """
    items: list[RecordView] = Field(default_factory=list)
    page: int
    page_size: int
    total_items: int
    links: list[Link] = Field(default_factory=list)
