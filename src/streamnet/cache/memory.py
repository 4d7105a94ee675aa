"""L1 in-memory LRU cache."""

from __future__ import annotations

import threading
from collections import OrderedDict

from streamnet.cache.stats import CacheEntry

_DEFAULT_MAX_ITEMS = 200
_DEFAULT_MAX_SIZE_MB = 100


class MemoryCache:
    """In-memory LRU cache bounded by entry count and total payload bytes."""

    def __init__(
        self,
        max_items: int = _DEFAULT_MAX_ITEMS,
        max_size_mb: float = _DEFAULT_MAX_SIZE_MB,
    ) -> None:
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_items = max_items
        self._max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_size_bytes = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired:
                self._remove(key)
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            return entry

    def set(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            if key in self._store:
                self._remove(key)
            entry_size = entry.size_bytes
            if entry_size > self._max_size_bytes:
                # Too large for this tier; the disk tier still holds it
                return
            while self._store and (
                len(self._store) >= self._max_items
                or self._current_size_bytes + entry_size > self._max_size_bytes
            ):
                self._evict_oldest()
            self._store[key] = entry
            self._current_size_bytes += entry_size

    def delete(self, key: str) -> None:
        with self._lock:
            self._remove(key)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._current_size_bytes = 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    @property
    def size_bytes(self) -> int:
        return self._current_size_bytes

    def _remove(self, key: str) -> None:
        entry = self._store.pop(key, None)
        if entry:
            self._current_size_bytes -= entry.size_bytes

    def _evict_oldest(self) -> None:
        if self._store:
            _, entry = self._store.popitem(last=False)
            self._current_size_bytes -= entry.size_bytes
