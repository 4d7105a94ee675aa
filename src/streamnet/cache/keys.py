"""Cache key helpers: keyspaces and on-disk file names."""

from __future__ import annotations

import hashlib

THUMBNAIL_PREFIX = "thumbnail_"


def thumbnail_key(key: str) -> str:
    """Keyspace for binary thumbnails, kept apart from generic values."""
    return THUMBNAIL_PREFIX + key


def is_thumbnail_key(key: str) -> bool:
    return key.startswith(THUMBNAIL_PREFIX)


def file_name_for(key: str) -> str:
    """Filesystem-safe name derived from a cache key."""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def request_cache_key(method: str, url: str) -> str:
    """Key for a cached API response: method plus full URL, query included."""
    return f"api:{method.upper()}:{url}"
