"""Pydantic models for the resolved network configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from streamnet.config.defaults import (
    DEFAULT_BASE_URL,
    DEFAULT_CACHE_DIR,
    DEFAULT_CACHE_MEMORY_ITEMS,
    DEFAULT_CACHE_MEMORY_MB,
    DEFAULT_CACHE_SWEEP_INTERVAL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RATE_LIMIT_MAX_REQUESTS,
    DEFAULT_RATE_LIMIT_WINDOW,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESOURCE_TIMEOUT,
    DEFAULT_RETRY_INITIAL_WAIT,
)
from streamnet.config.hierarchy import load_config_hierarchy
from streamnet.types import RateLimitQuota, RetryConfig, RetryStrategy, TimeoutConfig

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class NetworkSettings(BaseModel):
    """Validated view of the merged configuration dict.

    Field names mirror the keys produced by ``load_config_hierarchy()``;
    unknown keys are ignored so a shared YAML file can carry other sections.
    """

    base_url: str = DEFAULT_BASE_URL
    api_token: str | None = None

    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    resource_timeout: float = Field(default=DEFAULT_RESOURCE_TIMEOUT, gt=0)

    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0)
    retry_strategy: RetryStrategy = RetryStrategy.EXPONENTIAL
    retry_initial_wait: float = Field(default=DEFAULT_RETRY_INITIAL_WAIT, ge=0)

    cache_dir: Path = Path(DEFAULT_CACHE_DIR)
    cache_memory_items: int = Field(default=DEFAULT_CACHE_MEMORY_ITEMS, ge=1)
    cache_memory_mb: float = Field(default=DEFAULT_CACHE_MEMORY_MB, gt=0)
    cache_disabled: bool = False
    cache_sweep_interval: float = Field(default=DEFAULT_CACHE_SWEEP_INTERVAL, gt=0)

    rate_limit_max_requests: int = Field(default=DEFAULT_RATE_LIMIT_MAX_REQUESTS, ge=1)
    rate_limit_window: float = Field(default=DEFAULT_RATE_LIMIT_WINDOW, gt=0)
    rate_limits: dict[str, RateLimitQuota] = Field(default_factory=dict)

    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _expand_cache_dir(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Path(value).expanduser()
        return value

    @field_validator("rate_limits", mode="before")
    @classmethod
    def _lowercase_hosts(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(host).lower(): quota for host, quota in value.items()}
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {value!r}")
        return level

    @property
    def timeouts(self) -> TimeoutConfig:
        return TimeoutConfig(
            request_seconds=self.request_timeout,
            resource_seconds=self.resource_timeout,
        )

    @property
    def retry(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            strategy=self.retry_strategy,
            initial_wait=self.retry_initial_wait,
        )

    @property
    def default_quota(self) -> RateLimitQuota:
        return RateLimitQuota(
            max_requests=self.rate_limit_max_requests,
            window_seconds=self.rate_limit_window,
        )


def load_settings(**runtime_overrides: Any) -> NetworkSettings:
    """Resolve the configuration hierarchy and validate it."""
    return NetworkSettings.model_validate(load_config_hierarchy(**runtime_overrides))
