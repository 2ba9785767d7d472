# Storage Layer
# Pluggable persistence for message records
#
# This module provides:
# - Port interface (ABC) defining the record store contract
# - In-memory implementation for development/testing
# - SQLAlchemy implementation for relational persistence
# - Redis implementation as a document store
# - Factory for configuration-based adapter selection
#
# The SQLAlchemy and Redis adapters are imported from their own modules
# so that their drivers stay optional.

from .ports import (
    MESSAGE_MAX_LENGTH,
    Record,
    RecordOrder,
    RecordStore,
)
from .memory import InMemoryRecordStore
from .factory import (
    StorageSettings,
    StorageBackend,
    create_store,
    resolve_backend,
    select_store,
    supported_providers,
)

__all__ = [
    # Ports
    "MESSAGE_MAX_LENGTH",
    "Record",
    "RecordOrder",
    "RecordStore",
    # Adapters
    "InMemoryRecordStore",
    # Factory
    "StorageSettings",
    "StorageBackend",
    "create_store",
    "resolve_backend",
    "select_store",
    "supported_providers",
]
