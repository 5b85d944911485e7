"""
Key-Value Storage Media

Two media implement KeyValueStorage:
- InMemoryKeyValueStorage: a dict, gone when the process exits
- JsonFileKeyValueStorage: one JSON object on disk mapping keys to
  string values, the Python stand-in for browser local storage

TRADEOFFS:
- The whole file is rewritten on every set_item (fine for a handful of keys)
- Writes are atomic (temp file + replace), so a crash never leaves half a file
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from bill_tracker.services.storage.interface import KeyValueStorage, StorageError


logger = structlog.get_logger(__name__)


class InMemoryKeyValueStorage(KeyValueStorage):
    """Dict-backed medium for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileKeyValueStorage(KeyValueStorage):
    """
    File-backed medium.

    The file holds a single JSON object. A missing file reads as empty;
    the parent directory is created on the first write.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self._path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        directory = self._path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory, text=True
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            logger.error("storage_write_failed", path=str(self._path), error=str(e))
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Failed to write {self._path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is None:
            return None
        return value if isinstance(value, str) else json.dumps(value)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError:
            # An unreadable file is replaced rather than blocking every write
            logger.warning("storage_file_reset", path=str(self._path))
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
