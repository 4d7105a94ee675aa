"""Cache subsystem: two-tier (memory + disk) with per-entry expiration."""

from streamnet.cache.keys import request_cache_key, thumbnail_key
from streamnet.cache.manager import PersistentCache
from streamnet.cache.stats import CacheEntry, CacheStats

__all__ = [
    "PersistentCache",
    "CacheEntry",
    "CacheStats",
    "request_cache_key",
    "thumbnail_key",
]
