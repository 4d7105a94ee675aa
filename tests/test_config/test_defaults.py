"""Tests for package defaults."""

from streamnet.config.defaults import (
    APP_VERSION,
    DEFAULT_CACHE_DISABLED,
    DEFAULT_CACHE_MEMORY_ITEMS,
    DEFAULT_CACHE_MEMORY_MB,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESOURCE_TIMEOUT,
    DEFAULT_USER_AGENT,
    get_defaults,
)


class TestDefaults:
    def test_timeouts(self):
        assert DEFAULT_REQUEST_TIMEOUT == 30.0
        assert DEFAULT_RESOURCE_TIMEOUT == 60.0

    def test_retries(self):
        assert DEFAULT_MAX_RETRIES == 3

    def test_memory_tier_bounds(self):
        assert DEFAULT_CACHE_MEMORY_ITEMS == 200
        assert DEFAULT_CACHE_MEMORY_MB == 100.0

    def test_default_cache_not_disabled(self):
        assert DEFAULT_CACHE_DISABLED is False

    def test_default_log_level(self):
        assert DEFAULT_LOG_LEVEL == "WARNING"

    def test_user_agent_has_version(self):
        assert APP_VERSION in DEFAULT_USER_AGENT

    def test_get_defaults_rate_limits(self):
        d = get_defaults()
        assert d["rate_limits"]["api.twitch.tv"]["max_requests"] == 800
        assert d["rate_limits"]["googleapis.com"]["max_requests"] == 100

    def test_get_defaults_returns_fresh_copies(self):
        d = get_defaults()
        d["rate_limits"]["api.twitch.tv"]["max_requests"] = 1
        assert get_defaults()["rate_limits"]["api.twitch.tv"]["max_requests"] == 800

    def test_get_defaults_has_all_keys(self):
        expected_keys = {
            "base_url", "request_timeout", "resource_timeout",
            "max_retries", "retry_strategy", "retry_initial_wait",
            "cache_dir", "cache_memory_items", "cache_memory_mb",
            "cache_disabled", "cache_sweep_interval",
            "rate_limit_max_requests", "rate_limit_window", "rate_limits",
            "log_level",
        }
        assert expected_keys == set(get_defaults().keys())
