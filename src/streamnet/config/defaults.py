"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

APP_VERSION = "1.0.0"
DEFAULT_USER_AGENT = f"StreamyyyApp/{APP_VERSION} (python)"

# Default API settings
DEFAULT_BASE_URL = "https://api.streamyyy.com"

# Default timeout settings (seconds, per attempt)
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_RESOURCE_TIMEOUT = 60.0

# Default retry settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_STRATEGY = "exponential"
DEFAULT_RETRY_INITIAL_WAIT = 0.5

# Default cache settings
DEFAULT_CACHE_DIR = str(Path.home() / ".cache" / "streamnet")
DEFAULT_CACHE_MEMORY_ITEMS = 200
DEFAULT_CACHE_MEMORY_MB = 100.0
DEFAULT_CACHE_DISABLED = False
DEFAULT_CACHE_SWEEP_INTERVAL = 600.0

# Default rate limits (per host)
DEFAULT_RATE_LIMIT_MAX_REQUESTS = 600
DEFAULT_RATE_LIMIT_WINDOW = 60.0
DEFAULT_RATE_LIMITS: dict[str, dict[str, float]] = {
    "api.twitch.tv": {"max_requests": 800, "window_seconds": 60.0},
    "googleapis.com": {"max_requests": 100, "window_seconds": 60.0},
}

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "base_url": DEFAULT_BASE_URL,
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "resource_timeout": DEFAULT_RESOURCE_TIMEOUT,
        "max_retries": DEFAULT_MAX_RETRIES,
        "retry_strategy": DEFAULT_RETRY_STRATEGY,
        "retry_initial_wait": DEFAULT_RETRY_INITIAL_WAIT,
        "cache_dir": DEFAULT_CACHE_DIR,
        "cache_memory_items": DEFAULT_CACHE_MEMORY_ITEMS,
        "cache_memory_mb": DEFAULT_CACHE_MEMORY_MB,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "cache_sweep_interval": DEFAULT_CACHE_SWEEP_INTERVAL,
        "rate_limit_max_requests": DEFAULT_RATE_LIMIT_MAX_REQUESTS,
        "rate_limit_window": DEFAULT_RATE_LIMIT_WINDOW,
        "rate_limits": {host: dict(quota) for host, quota in DEFAULT_RATE_LIMITS.items()},
        "log_level": DEFAULT_LOG_LEVEL,
    }
