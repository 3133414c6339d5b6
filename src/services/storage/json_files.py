"""
JSON File Storage Implementation

Each storage key lives in its own `<key>.json` file inside a data directory,
the on-disk counterpart of one localStorage entry.

Writes go to a temporary file in the same directory which is then moved over
the target with os.replace, so a crash mid-write never leaves a half-written
document behind.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog

from src.services.storage.interface import (
    KeyValueStore,
    StorageReadError,
    StorageWriteError,
)

logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Directory of JSON documents, one per key."""

    def __init__(self, data_dir: Path, indent: Optional[int] = 2):
        self._data_dir = Path(data_dir)
        self._indent = indent

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageReadError(f"Could not read {path}: {e}") from e

    def write(self, key: str, value: Any) -> bool:
        path = self._path_for(key)
        try:
            content = json.dumps(value, indent=self._indent, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageWriteError(f"Value for {key!r} is not JSON-serializable: {e}") from e

        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self._data_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageWriteError(f"Could not write {path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", path=tmp_name)

        logger.debug("storage_written", key=key, path=str(path), size=len(content))
        return True

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageWriteError(f"Could not delete {path}: {e}") from e
        return True
