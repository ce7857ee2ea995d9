"""
Storage Services Package

Provides the durable record abstraction, its file and in-memory
implementations, and the codec that maps the domain state onto a record.
"""

from expense_tracker.services.storage.interface import (
    RecordStoreInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from expense_tracker.services.storage.file_store import FileRecordStore
from expense_tracker.services.storage.memory_store import InMemoryRecordStore
from expense_tracker.services.storage.codec import (
    StateCodec,
    merge_settings,
    state_from_document,
)

__all__ = [
    # Interfaces
    "RecordStoreInterface",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "FileRecordStore",
    "InMemoryRecordStore",
    # Codec
    "StateCodec",
    "merge_settings",
    "state_from_document",
]
