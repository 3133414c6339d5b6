"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
Currently implements a JSON-file directory and an in-memory store.
"""

from src.services.storage.interface import (
    KeyValueStore,
    StorageError,
    StorageKey,
    StorageReadError,
    StorageWriteError,
)
from src.services.storage.json_files import JsonFileKeyValueStore
from src.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interface
    "KeyValueStore",
    "StorageKey",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
