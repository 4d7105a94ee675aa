"""Sliding-window rate limiting per upstream API host."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Mapping

from streamnet.types import RateLimitQuota

logger = logging.getLogger(__name__)

# Upstream quotas observed for the platforms the app talks to.
DEFAULT_HOST_QUOTAS: dict[str, RateLimitQuota] = {
    "api.twitch.tv": RateLimitQuota(max_requests=800, window_seconds=60),
    "googleapis.com": RateLimitQuota(max_requests=100, window_seconds=60),
}


class SlidingWindowRateLimiter:
    """Admits at most ``max_requests`` within any ``window_seconds`` span.

    Timestamps of admitted requests are kept in a deque and pruned on every
    check. A single lock serializes pruning, counting and recording, so the
    count used for admission always reflects the latest prune.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        host: str = "",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.host = host
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

        # Stats
        self._total_admitted = 0
        self._total_denied = 0

    def can_make_request(self) -> bool:
        with self._lock:
            self._prune(self._clock())
            return len(self._timestamps) < self.max_requests

    def record_request(self) -> None:
        with self._lock:
            self._timestamps.append(self._clock())
            self._total_admitted += 1

    def try_acquire(self) -> bool:
        """Check and record as one step. Returns False when the window is full."""
        with self._lock:
            now = self._clock()
            self._prune(now)
            if len(self._timestamps) >= self.max_requests:
                self._total_denied += 1
                return False
            self._timestamps.append(now)
            self._total_admitted += 1
            return True

    @property
    def stats(self) -> dict:
        """Return current limiter statistics."""
        with self._lock:
            self._prune(self._clock())
            in_window = len(self._timestamps)
        return {
            "host": self.host,
            "in_window": in_window,
            "available": max(self.max_requests - in_window, 0),
            "total_admitted": self._total_admitted,
            "total_denied": self._total_denied,
        }

    def reset(self) -> None:
        """Reset all state (for testing)."""
        with self._lock:
            self._timestamps.clear()
            self._total_admitted = 0
            self._total_denied = 0

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()


class RateLimiterRegistry:
    """Maps hosts to limiters, creating them lazily.

    A registered quota applies to its exact host and to any subdomain of it
    (``www.googleapis.com`` uses the ``googleapis.com`` quota). Hosts with no
    registered quota get their own limiter with the default quota.
    """

    def __init__(
        self,
        quotas: Mapping[str, RateLimitQuota] | None = None,
        default_quota: RateLimitQuota | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._quotas = {
            host.lower(): quota
            for host, quota in (DEFAULT_HOST_QUOTAS if quotas is None else quotas).items()
        }
        self._default_quota = default_quota or RateLimitQuota(max_requests=600, window_seconds=60)
        self._clock = clock
        self._limiters: dict[str, SlidingWindowRateLimiter] = {}
        self._lock = threading.Lock()

    def register(self, host: str, quota: RateLimitQuota) -> SlidingWindowRateLimiter:
        """Register (or replace) a quota for ``host`` and return its limiter."""
        host = host.lower()
        with self._lock:
            self._quotas[host] = quota
            limiter = self._build(host, quota)
            self._limiters[host] = limiter
            return limiter

    def limiter_for(self, host: str) -> SlidingWindowRateLimiter:
        key = self.resolve_key(host)
        with self._lock:
            limiter = self._limiters.get(key)
            if limiter is None:
                quota = self._quotas.get(key, self._default_quota)
                limiter = self._build(key, quota)
                self._limiters[key] = limiter
                logger.debug(
                    "Created rate limiter for %s (%d/%.0fs)",
                    key, quota.max_requests, quota.window_seconds,
                )
            return limiter

    def resolve_key(self, host: str) -> str:
        """Return the registered domain governing ``host``, or the host itself."""
        host = host.lower().rstrip(".")
        candidates = [
            registered
            for registered in self._quotas
            if host == registered or host.endswith("." + registered)
        ]
        if not candidates:
            return host
        # Most specific registration wins
        return max(candidates, key=len)

    @property
    def stats(self) -> dict[str, dict]:
        with self._lock:
            limiters = dict(self._limiters)
        return {host: limiter.stats for host, limiter in limiters.items()}

    def _build(self, host: str, quota: RateLimitQuota) -> SlidingWindowRateLimiter:
        return SlidingWindowRateLimiter(
            max_requests=quota.max_requests,
            window_seconds=quota.window_seconds,
            host=host,
            clock=self._clock,
        )
