"""
Abstract Key-Value Storage Interface

The ledger persists through a deliberately small contract: named keys, each
holding one JSON document. This mirrors the browser's localStorage, and lets
us:
1. Keep the ledger on disk as one JSON file per key
2. Use in-memory storage for testing
3. Swap in another medium without touching the store

Adapters raise StorageReadError / StorageWriteError when the medium fails.
The LedgerStore turns those into fail-soft behaviour (defaults on read,
a logged failure on write).
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional


class StorageKey(str, Enum):
    """One key per entity group."""
    AGENT_PROFILE = "agentProfile"
    CUSTOMERS = "customers"
    COLLECTIONS = "collections"
    DEPOSITS = "deposits"
    APP_SETTINGS = "appSettings"


class KeyValueStore(ABC):
    """
    Abstract interface for key-value persistence.

    Values are JSON-serializable documents: an object for singletons,
    an array of objects for collections.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[Any]:
        """
        Read the document stored under a key.

        Args:
            key: Storage key

        Returns:
            The decoded JSON value, or None if the key is absent

        Raises:
            StorageReadError: If the medium is unavailable or the stored
                value cannot be decoded
        """
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> bool:
        """
        Replace the document stored under a key.

        Args:
            key: Storage key
            value: JSON-serializable value

        Returns:
            True if written

        Raises:
            StorageWriteError: If the value cannot be serialized or the
                medium refuses the write (unavailable, over capacity)
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored value could not be read or decoded."""
    pass


class StorageWriteError(StorageError):
    """Value could not be serialized or written."""
    pass
