"""Concurrency: per-host request admission control."""

from streamnet.concurrency.rate_limiter import RateLimiterRegistry, SlidingWindowRateLimiter

__all__ = ["RateLimiterRegistry", "SlidingWindowRateLimiter"]
