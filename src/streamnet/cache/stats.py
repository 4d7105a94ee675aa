"""Cache entry and statistics models."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, Field


class PayloadKind(StrEnum):
    """How a stored payload is handed back: parsed JSON or the raw bytes."""

    JSON = "json"
    BYTES = "bytes"


class CacheEntry(BaseModel):
    """A cached payload with its absolute expiry (epoch seconds)."""

    key: str
    payload: bytes
    created_at: float = Field(default_factory=time.time)
    expires_at: float

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expires_at

    @property
    def size_bytes(self) -> int:
        return len(self.payload)


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    memory_entries: int = 0
    size_bytes: int = 0
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)
