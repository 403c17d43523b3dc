from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from filelock import FileLock

from adapters.filesystem.json_utils import load_json_object, write_json_locked
from domain.ports.translations import CacheStorage
from domain.translations import CACHE_STORAGE_KEY


class FileSystemCacheStorage(CacheStorage):
    """Persists the loader cache as a single JSON blob on disk."""

    def __init__(self, directory: Path, key: str = CACHE_STORAGE_KEY) -> None:
        self._path = directory / f"{key}.json"

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None
        return load_json_object(self._path)

    def save(self, payload: Mapping[str, Any]) -> None:
        write_json_locked(self._path, payload)

    def remove(self) -> None:
        if not self._path.parent.exists():
            return
        with FileLock(str(self._path.with_suffix(f"{self._path.suffix}.lock"))):
            self._path.unlink(missing_ok=True)
