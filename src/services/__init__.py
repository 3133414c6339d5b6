"""Services package."""

from src.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageError,
    StorageKey,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "StorageError",
    "StorageKey",
    "StorageReadError",
    "StorageWriteError",
]
