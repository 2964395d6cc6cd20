"""
JSON File Storage Implementation

DESIGN DECISION: The ledger lives in a single JSON object on the user's
machine, mirroring how the browser app kept everything in local storage:
1. No database setup required
2. The user can open and read their own data
3. Nothing leaves the device

TRADEOFFS:
- The whole file is rewritten on every write (fine for a personal ledger)
- One process at a time; there is no file locking

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a crash mid-write leaves the previous file intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

import structlog

from src.services.storage.interface import (
    KeyValueStoreInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStoreInterface):
    """
    Key-value store persisted as one JSON object of string values.

    The file is read once at construction; afterwards the in-memory copy
    is authoritative and every mutation is flushed to disk before returning.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._data = self._read_file()

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, str]:
        """Load the file, treating a missing file as an empty store."""
        if not self._path.exists():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageReadError(f"Could not read {self._path}: {e}") from e

        if not isinstance(raw, dict):
            raise StorageReadError(
                f"Expected a JSON object in {self._path}, found {type(raw).__name__}"
            )

        # Non-string values are kept as their JSON text; the ledger decides
        # whether they parse.
        return {
            str(key): value if isinstance(value, str) else json.dumps(value)
            for key, value in raw.items()
        }

    def _flush(self, data: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("json_store_write_failed", path=str(self._path), error=str(e))
            raise StorageWriteError(f"Could not write {self._path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        updated = {**self._data, key: value}
        self._flush(updated)
        self._data = updated

    def remove(self, key: str) -> None:
        if key not in self._data:
            return
        updated = {k: v for k, v in self._data.items() if k != key}
        self._flush(updated)
        self._data = updated

    def set_many(self, items: dict[str, str]) -> None:
        """Write every item in a single flush; all land or none do."""
        updated = {**self._data, **items}
        self._flush(updated)
        self._data = updated

    def remove_many(self, keys: Iterable[str]) -> None:
        doomed = set(keys) & set(self._data)
        if not doomed:
            return
        updated = {k: v for k, v in self._data.items() if k not in doomed}
        self._flush(updated)
        self._data = updated

    def keys(self) -> list[str]:
        return list(self._data)
