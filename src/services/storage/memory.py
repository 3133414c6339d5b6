"""
In-Memory Storage Implementation

Holds serialized JSON text per key, the same way localStorage holds strings.
Values are round-tripped through json so non-serializable data fails here
exactly as it would against a real medium.

An optional byte quota simulates a full storage medium.
"""

import json
from typing import Any, Optional

from src.services.storage.interface import (
    KeyValueStore,
    StorageReadError,
    StorageWriteError,
)


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local key-value store."""

    def __init__(
        self,
        initial: Optional[dict[str, Any]] = None,
        max_bytes: Optional[int] = None,
    ):
        self._items: dict[str, str] = {}
        self._max_bytes = max_bytes
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Optional[Any]:
        raw = self._items.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Corrupt value under {key!r}: {e}") from e

    def write(self, key: str, value: Any) -> bool:
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        if self._max_bytes is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(raw) > self._max_bytes:
                raise StorageWriteError(
                    f"Quota exceeded writing {key!r} ({used + len(raw)} > {self._max_bytes} bytes)"
                )

        self._items[key] = raw
        return True

    def delete(self, key: str) -> bool:
        return self._items.pop(key, None) is not None

    def put_raw(self, key: str, raw: str) -> None:
        """Store text as-is, bypassing serialization (for corrupt-data tests)."""
        self._items[key] = raw

    def keys(self) -> list[str]:
        return list(self._items)
