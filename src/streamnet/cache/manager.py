"""Persistent cache: orchestrates L1 (memory) and L2 (disk) tiers."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
from datetime import timedelta
from pathlib import Path
from typing import Any, TypeVar

from streamnet.cache.disk import DiskCache, ExpirationIndex
from streamnet.cache.keys import thumbnail_key
from streamnet.cache.memory import MemoryCache
from streamnet.cache.stats import CacheEntry, CacheStats, PayloadKind
from streamnet.errors.exceptions import DecodingError, EncodingError
from streamnet.http.codec import decode_body, encode_body

logger = logging.getLogger(__name__)

T = TypeVar("T")

_THUMBNAIL_TTL = 3600.0
# Disk entries with no expiration record (index lost or unreadable)
_ORPHAN_TTL = 3600.0
_SWEEP_INTERVAL = 600.0


class PersistentCache:
    """Two-tier cache: L1 in-memory → L2 on-disk, with per-entry expiry.

    The expiration index is authoritative: an entry whose expiry has passed
    is purged from both tiers the next time it is read or swept. Disk
    failures are logged and degrade to a miss (reads) or a skipped write.
    """

    def __init__(
        self,
        root: Path | None = None,
        memory_max_items: int = 200,
        memory_max_mb: float = 100,
    ) -> None:
        self._l1 = MemoryCache(max_items=memory_max_items, max_size_mb=memory_max_mb)
        self._l2 = DiskCache(root=root)
        self._index = ExpirationIndex(self._l2.metadata_dir)
        self._counter_lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def root(self) -> Path:
        return self._l2.root

    # ── Generic values ──

    def store(self, key: str, value: Any, expiration: float | timedelta) -> bool:
        """Serialize ``value`` and write it to both tiers.

        ``bytes`` values are kept verbatim and come back as ``bytes``.
        Returns False when the value could not be encoded or the disk write
        failed; the cache is an optimization, so neither raises.
        """
        ttl = _to_seconds(expiration)
        if isinstance(value, (bytes, bytearray)):
            return self._store_payload(key, bytes(value), ttl, PayloadKind.BYTES)
        try:
            payload = encode_body(value)
        except EncodingError as e:
            logger.warning("Not caching %s: %s", key, e)
            return False
        return self._store_payload(key, payload, ttl, PayloadKind.JSON)

    def store_encoded(self, key: str, payload: bytes, expiration: float | timedelta) -> bool:
        """Store an already JSON-encoded payload (e.g. a response body) as-is."""
        return self._store_payload(key, bytes(payload), _to_seconds(expiration), PayloadKind.JSON)

    def retrieve(self, key: str, type_: type[T] | None = None) -> T | Any | None:
        """Return the cached value for ``key`` or None on miss/expiry."""
        payload = self._lookup(key)
        if payload is None:
            self._count(hit=False)
            return None
        if self._index.kind(key) == PayloadKind.BYTES and type_ in (None, bytes):
            self._count(hit=True)
            return payload
        try:
            value = decode_body(payload, type_)
        except DecodingError as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e)
            self.remove(key)
            self._count(hit=False)
            return None
        self._count(hit=True)
        return value

    def remove(self, key: str) -> None:
        """Purge ``key`` from both tiers and the index. Idempotent."""
        self._drop_payload(key)
        self._index.pop(key)

    def clear_all(self) -> None:
        """Empty both tiers and the index; the disk root is recreated."""
        self._l1.clear()
        try:
            self._l2.clear()
        except OSError as e:
            logger.warning("Failed to clear disk cache: %s", e)
        self._index.clear()

    def contains(self, key: str) -> bool:
        expires_at = self._index.get(key)
        return expires_at is not None and expires_at >= time.time()

    # ── Binary thumbnails ──

    def store_thumbnail(
        self, key: str, data: bytes, expiration: float | timedelta = _THUMBNAIL_TTL
    ) -> bool:
        return self._store_payload(
            thumbnail_key(key), bytes(data), _to_seconds(expiration), PayloadKind.BYTES
        )

    def retrieve_thumbnail(self, key: str) -> bytes | None:
        payload = self._lookup(thumbnail_key(key))
        self._count(hit=payload is not None)
        return payload

    def remove_thumbnail(self, key: str) -> None:
        self.remove(thumbnail_key(key))

    # ── Expiry sweep ──

    def sweep_expired(self) -> int:
        """Purge every entry whose expiry has passed. Returns the count purged."""
        expired = self._index.expired(time.time())
        for key in expired:
            self._drop_payload(key)
        self._index.pop_many(expired)
        if expired:
            logger.info("Swept %d expired cache entries", len(expired))
        return len(expired)

    def start_sweeper(self, interval: float = _SWEEP_INTERVAL) -> asyncio.Task[None]:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper

        async def _run() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    await asyncio.to_thread(self.sweep_expired)
                except Exception:
                    logger.exception("Cache sweep failed")

        self._sweeper = asyncio.create_task(_run(), name="streamnet-cache-sweeper")
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    # ── Statistics ──

    @property
    def hit_count(self) -> int:
        return self._hits

    @property
    def miss_count(self) -> int:
        return self._misses

    @property
    def hit_rate(self) -> float:
        return self.stats().hit_rate

    def stats(self) -> CacheStats:
        """Return aggregate cache statistics (walks the disk tier)."""
        try:
            size = self._l2.size_bytes
            entries = self._l2.entry_count
        except OSError as e:
            logger.warning("Failed to measure disk cache: %s", e)
            size, entries = 0, len(self._index)
        with self._counter_lock:
            hits, misses = self._hits, self._misses
        return CacheStats(
            entries=entries,
            memory_entries=len(self._l1),
            size_bytes=size,
            hits=hits,
            misses=misses,
        )

    def reset_stats(self) -> None:
        with self._counter_lock:
            self._hits = 0
            self._misses = 0

    # ── Internals ──

    def _store_payload(self, key: str, payload: bytes, ttl: float, kind: PayloadKind) -> bool:
        now = time.time()
        entry = CacheEntry(key=key, payload=payload, created_at=now, expires_at=now + ttl)
        try:
            self._l2.set(key, payload)
        except OSError as e:
            logger.warning("Failed to write cache file for %s: %s", key, e)
            # Keep the memory tier consistent with what is on disk
            self._l1.delete(key)
            self._index.pop(key)
            return False
        self._l1.set(key, entry)
        self._index.set(key, entry.expires_at, kind)
        return True

    def _drop_payload(self, key: str) -> None:
        self._l1.delete(key)
        try:
            self._l2.delete(key)
        except OSError as e:
            logger.warning("Failed to delete cache file for %s: %s", key, e)

    def _lookup(self, key: str) -> bytes | None:
        """Expiry check → L1 → L2 (with promotion). Does not touch counters."""
        now = time.time()
        expires_at = self._index.get(key)
        if expires_at is not None and expires_at < now:
            self.remove(key)
            return None

        entry = self._l1.get(key)
        if entry is not None:
            return entry.payload

        try:
            payload = self._l2.get(key)
        except OSError as e:
            logger.warning("Failed to read cache file for %s: %s", key, e)
            return None
        if payload is None:
            return None

        # Promote to L1
        if expires_at is None:
            expires_at = now + _ORPHAN_TTL
            self._index.set(key, expires_at)
        self._l1.set(key, CacheEntry(key=key, payload=payload, created_at=now, expires_at=expires_at))
        return payload

    def _count(self, hit: bool) -> None:
        with self._counter_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1


def _to_seconds(expiration: float | timedelta) -> float:
    seconds = expiration.total_seconds() if isinstance(expiration, timedelta) else float(expiration)
    if seconds <= 0:
        raise ValueError("expiration must be positive")
    return seconds
