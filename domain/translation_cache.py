from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from domain.ports.translations import CacheStorage

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_MS = 300_000


def current_time_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    timestamp: float

    def is_fresh(self, now: float, ttl_ms: float) -> bool:
        return now - self.timestamp <= ttl_ms

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, payload: Any) -> CacheEntry | None:
        if not isinstance(payload, dict) or "data" not in payload:
            return None
        timestamp = payload.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int | float):
            return None
        return cls(data=payload["data"], timestamp=float(timestamp))


class TranslationCache:
    """In-memory TTL cache, mirrored to an optional storage blob after each write.

    Expired entries are evicted when they are looked up. Storage failures are
    logged and otherwise ignored.
    """

    def __init__(
        self,
        ttl_ms: float = DEFAULT_CACHE_TTL_MS,
        storage: CacheStorage | None = None,
        clock: Callable[[], float] = current_time_ms,
    ) -> None:
        self._ttl_ms = ttl_ms
        self._storage = storage
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_fresh(self._clock(), self._ttl_ms):
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
        self.persist()

    def delete_many(self, keys: Iterable[str]) -> int:
        removed = 0
        for key in list(keys):
            if self._entries.pop(key, None) is not None:
                removed += 1
        if removed:
            self.persist()
        return removed

    def clear(self) -> None:
        self._entries.clear()
        if self._storage is None:
            return
        try:
            self._storage.remove()
        except OSError as exc:
            logger.warning("Failed to remove i18n cache from storage: %s", exc)

    def restore(self) -> int:
        if self._storage is None:
            return 0
        try:
            stored = self._storage.load()
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load i18n cache from storage: %s", exc)
            return 0
        if not stored:
            return 0
        now = self._clock()
        restored = 0
        for key, raw_entry in stored.items():
            entry = CacheEntry.from_dict(raw_entry)
            if entry is None or not entry.is_fresh(now, self._ttl_ms):
                continue
            self._entries[str(key)] = entry
            restored += 1
        return restored

    def persist(self) -> None:
        if self._storage is None:
            return
        payload = {key: entry.to_dict() for key, entry in self._entries.items()}
        try:
            self._storage.save(payload)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to save i18n cache to storage: %s", exc)
