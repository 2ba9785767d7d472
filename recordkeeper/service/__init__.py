# Record Service
# Validation, delegation and result shaping for callers

from .records import RecordService, validate_id, validate_record
from .schemas import Link, PagedRecords, RecordView
from .links import build_links

__all__ = [
    "RecordService",
    "validate_id",
    "validate_record",
    "Link",
    "PagedRecords",
    "RecordView",
    "build_links",
]
