"""Services package."""

from autoshop.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    NotFoundError,
    SerializationError,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "NotFoundError",
    "SerializationError",
    "StorageError",
]
