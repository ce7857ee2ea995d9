"""
Abstract Record Store Interface

DESIGN DECISION: The domain state lives in a single durable key-value
record, the way a browser keeps it in local storage. We define an abstract
interface for that record so we can:
1. Keep the state in a JSON file on disk for real use
2. Use in-memory storage for testing
3. Swap in another backend without touching the codec or the manager

The interface is intentionally tiny: text in, text out, keyed by name.
Parsing and shape validation belong to the codec, not the store.
"""

from abc import ABC, abstractmethod
from typing import Optional


class RecordStoreInterface(ABC):
    """
    Abstract interface for durable key-value records.

    Writes are synchronous: when set() returns, the value survives a restart.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a record.

        Returns:
            The stored text, or None if the record does not exist

        Raises:
            StorageReadError: If the record exists but cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Create or overwrite a record.

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a record.

        Returns:
            True if a record was removed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Durable record is present but cannot be read or parsed."""
    pass


class StorageWriteError(StorageError):
    """Durable record could not be written."""
    pass
