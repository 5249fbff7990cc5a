"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The record store sits on a minimal key-value substrate.
This allows us to:
1. Keep the on-device JSON layout (one array per namespace)
2. Use in-memory storage for testing
3. Swap in Google Sheets (or a real database) without touching the store

The interface is intentionally tiny - get, set, remove of whole
namespaces. Records are (de)serialized by the record store, not here.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the persistence substrate.

    Any implementation must raise StorageError (or a subclass) for every
    fault. Callers never see backend-specific exceptions.
    """

    @abstractmethod
    async def get(self, namespace: str) -> Optional[str]:
        """
        Read the serialized collection stored under a namespace.

        Args:
            namespace: The namespace key

        Returns:
            The stored text, or None if the namespace was never written

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set(self, namespace: str, value: str) -> None:
        """
        Replace the serialized collection stored under a namespace.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, namespace: str) -> None:
        """
        Remove a namespace entirely. Removing an absent namespace is a no-op.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class SerializationError(StorageError):
    """Stored text could not be decoded into records, or records encoded."""
    pass


class NotFoundError(Exception):
    """
    Record not found in its collection.

    NOTE: Deliberately not a StorageError. A missing id is a warning,
    not a fault.
    """
    pass
