"""
JSON File Storage Implementation

One file per namespace under a data directory, each holding the JSON
array text written by the record store. This mirrors the device-local
storage the shop app runs on.

TRADEOFFS:
- Whole-file rewrite on every mutation (fine for a single-user shop)
- No cross-process locking
"""

import os
import re
from pathlib import Path
from typing import Optional

from autoshop.services.storage.interface import KeyValueStore, StorageError


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._@-]")


class JsonFileKeyValueStore(KeyValueStore):
    """File-per-namespace substrate."""

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    def _path_for(self, namespace: str) -> Path:
        """Map a namespace to its file, keeping the name filesystem-safe."""
        safe = _UNSAFE_CHARS.sub("_", namespace)
        return self._data_dir / f"{safe}.json"

    async def get(self, namespace: str) -> Optional[str]:
        path = self._path_for(namespace)
        try:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {namespace}: {e}")

    async def set(self, namespace: str, value: str) -> None:
        path = self._path_for(namespace)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            # Readers only ever see a complete array
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write {namespace}: {e}")

    async def remove(self, namespace: str) -> None:
        path = self._path_for(namespace)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove {namespace}: {e}")
