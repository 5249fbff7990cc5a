"""
Storage Services Package

Provides the key-value substrate interface and its implementations.
In-memory, JSON file and Google Sheets backends are available.
"""

from autoshop.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    NotFoundError,
    SerializationError,
    StorageError,
)
from autoshop.services.storage.memory import InMemoryKeyValueStore
from autoshop.services.storage.json_file import JsonFileKeyValueStore
from autoshop.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "SerializationError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
