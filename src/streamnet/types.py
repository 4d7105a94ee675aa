"""Shared Pydantic models for streamnet."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class InterfaceType(StrEnum):
    WIFI = "wifi"
    CELLULAR = "cellular"
    ETHERNET = "ethernet"
    LOOPBACK = "loopback"
    OTHER = "other"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _INTERFACE_DISPLAY_NAMES[self]


_INTERFACE_DISPLAY_NAMES = {
    InterfaceType.WIFI: "Wi-Fi",
    InterfaceType.CELLULAR: "Cellular",
    InterfaceType.ETHERNET: "Ethernet",
    InterfaceType.LOOPBACK: "Loopback",
    InterfaceType.OTHER: "Other",
    InterfaceType.UNKNOWN: "Unknown",
}


class PathStatus(StrEnum):
    """Raw reachability status as reported by the platform."""

    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"
    REQUIRES_CONNECTION = "requires_connection"


class ConnectionQuality(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class HTTPMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class CachePolicy(StrEnum):
    NETWORK_ONLY = "network_only"
    RETURN_CACHE_ELSE_LOAD = "return_cache_else_load"
    RELOAD_AND_STORE = "reload_and_store"


class RetryStrategy(StrEnum):
    EXPONENTIAL = "exponential"
    LINEAR = "linear"
    FIXED = "fixed"


# ── Config models ──


class RetryConfig(BaseModel):
    max_retries: int = 3
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL
    initial_wait: float = 0.5
    jitter: bool = False


class TimeoutConfig(BaseModel):
    request_seconds: float = 30.0
    resource_seconds: float = 60.0


class RateLimitQuota(BaseModel):
    max_requests: int
    window_seconds: float = 60.0


# ── Connectivity ──


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConnectivityState(BaseModel):
    """Snapshot of network reachability."""

    model_config = ConfigDict(frozen=True)

    is_connected: bool = True
    interface_type: InterfaceType = InterfaceType.UNKNOWN
    quality: ConnectionQuality = ConnectionQuality.POOR
    last_connected_at: datetime = Field(default_factory=_utcnow)


# ── Metrics ──


class RequestMetrics(BaseModel):
    """Request counters owned by the API client."""

    active_requests: int = 0
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests

    @property
    def error_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.failed_requests / self.total_requests


class NetworkMetrics(BaseModel):
    """Everything dashboards read: request counters plus cache figures."""

    active_requests: int = 0
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    success_rate: float = 0.0
    error_rate: float = 0.0
    cache_hit_rate: float = 0.0
    cache_size: int = 0


# ── API payloads ──


class StreamData(BaseModel):
    id: str
    title: str
    streamer_name: str
    platform: str
    url: str
    embed_url: str | None = None
    thumbnail_url: str | None = None
    is_live: bool = False
    viewer_count: int | None = None
    category: str | None = None
    tags: list[str] | None = None
    started_at: datetime | None = None
    language: str | None = None

    @property
    def display_viewer_count(self) -> str:
        count = self.viewer_count
        if count is None:
            return ""
        if count >= 1_000_000:
            return f"{count / 1_000_000:.1f}M"
        if count >= 1_000:
            return f"{count / 1_000:.1f}K"
        return str(count)


class StreamStatus(BaseModel):
    id: str
    is_live: bool
    viewer_count: int = 0
    updated_at: datetime


class UserPreferences(BaseModel):
    theme: str = "system"
    auto_play: bool = True
    notifications: bool = True
    quality: str = "auto"
    default_layout: str = "grid"


class SubscriptionInfo(BaseModel):
    id: str
    plan: str
    status: str
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool = False


class UserProfile(BaseModel):
    id: str
    email: str
    full_name: str
    avatar_url: str | None = None
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    subscription: SubscriptionInfo | None = None
    created_at: datetime
    updated_at: datetime

