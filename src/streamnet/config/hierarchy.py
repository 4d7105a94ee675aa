"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.streamnet/config.yaml)
  3. Project config   (./streamnet.yaml)
  4. Environment variables (STREAMNET_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from streamnet.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".streamnet" / "config.yaml"
_PROJECT_CONFIG_NAME = "streamnet.yaml"

# Map of environment variables to config keys
_ENV_MAP: dict[str, str] = {
    "STREAMNET_BASE_URL": "base_url",
    "STREAMNET_API_TOKEN": "api_token",
    "STREAMNET_REQUEST_TIMEOUT": "request_timeout",
    "STREAMNET_RESOURCE_TIMEOUT": "resource_timeout",
    "STREAMNET_MAX_RETRIES": "max_retries",
    "STREAMNET_RETRY_STRATEGY": "retry_strategy",
    "STREAMNET_RETRY_INITIAL_WAIT": "retry_initial_wait",
    "STREAMNET_CACHE_DIR": "cache_dir",
    "STREAMNET_CACHE_DISABLED": "cache_disabled",
    "STREAMNET_CACHE_MEMORY_ITEMS": "cache_memory_items",
    "STREAMNET_CACHE_MEMORY_MB": "cache_memory_mb",
    "STREAMNET_CACHE_SWEEP_INTERVAL": "cache_sweep_interval",
    "STREAMNET_RATE_LIMIT_MAX_REQUESTS": "rate_limit_max_requests",
    "STREAMNET_RATE_LIMIT_WINDOW": "rate_limit_window",
    "STREAMNET_LOG_LEVEL": "log_level",
}

# Keys that should be parsed as specific types
_TYPE_MAP: dict[str, type] = {
    "request_timeout": float,
    "resource_timeout": float,
    "max_retries": int,
    "retry_initial_wait": float,
    "cache_memory_items": int,
    "cache_memory_mb": float,
    "cache_sweep_interval": float,
    "rate_limit_max_requests": int,
    "rate_limit_window": float,
}

# Boolean env var values
_TRUTHY = {"1", "true", "yes", "on"}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values. ``rate_limits``
    is merged per host, so a project file can tighten one host's quota
    without dropping the others.
    """
    config = get_defaults()

    # Layer 2: Global config
    _merge(config, _load_yaml_config(_GLOBAL_CONFIG_PATH))

    # Layer 3: Project config (search from cwd upward)
    project_path = _find_project_config()
    if project_path:
        _merge(config, _load_yaml_config(project_path))

    # Layer 4: Environment variables
    _merge(config, _load_env_vars())

    # Layer 5: Runtime arguments (highest priority)
    # None means "not given"
    _merge(config, {key: value for key, value in runtime_overrides.items() if value is not None})

    return config


def _merge(config: dict[str, Any], layer: dict[str, Any] | None) -> None:
    if not layer:
        return
    for key, value in layer.items():
        if key == "rate_limits" and isinstance(value, dict):
            merged = dict(config.get("rate_limits") or {})
            merged.update(value)
            config["rate_limits"] = merged
        else:
            config[key] = value


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.exists() or not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
        if isinstance(data, dict):
            return data
        logger.warning("Config file %s is not a mapping, ignoring", path)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
    return None


def _find_project_config() -> Path | None:
    """Search for streamnet.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.exists():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    """Read STREAMNET_* environment variables."""
    result: dict[str, Any] = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        result[config_key] = _coerce_env_value(config_key, value)

    raw_limits = os.environ.get("STREAMNET_RATE_LIMITS")
    if raw_limits:
        result["rate_limits"] = parse_rate_limits(raw_limits)
    return result


def parse_rate_limits(raw: str) -> dict[str, dict[str, float]]:
    """Parse ``host=max/window[,host=max/window...]``.

    ``api.twitch.tv=800/60,googleapis.com=100`` → window defaults to 60s.
    Malformed items are logged and skipped.
    """
    limits: dict[str, dict[str, float]] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        host, sep, quota_text = item.partition("=")
        if not sep or not host.strip():
            logger.warning("Ignoring malformed rate limit %r", item)
            continue
        count, _, window = quota_text.partition("/")
        try:
            limits[host.strip().lower()] = {
                "max_requests": int(count),
                "window_seconds": float(window) if window else 60.0,
            }
        except ValueError:
            logger.warning("Ignoring malformed rate limit %r", item)
    return limits


def _coerce_env_value(key: str, value: str) -> Any:
    """Coerce an environment variable string to the appropriate type."""
    if key.endswith("_disabled"):
        return value.lower() in _TRUTHY

    target_type = _TYPE_MAP.get(key)
    if target_type:
        try:
            return target_type(value)
        except (ValueError, TypeError):
            logger.warning(
                "Cannot convert env var for '%s' to %s: %s", key, target_type.__name__, value
            )
            return value

    return value
