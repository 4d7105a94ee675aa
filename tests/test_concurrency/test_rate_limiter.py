"""Tests for the sliding-window rate limiter and per-host registry."""

import threading

import pytest

from streamnet.concurrency.rate_limiter import RateLimiterRegistry, SlidingWindowRateLimiter
from streamnet.types import RateLimitQuota


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestSlidingWindowRateLimiter:
    def test_admits_up_to_limit(self):
        limiter = SlidingWindowRateLimiter(3, 60, clock=FakeClock())
        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]

    def test_admits_again_after_window(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(3, 60, clock=clock)
        assert all(limiter.try_acquire() for _ in range(3))
        assert not limiter.try_acquire()
        clock.advance(61)
        assert limiter.try_acquire()

    def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(2, 60, clock=clock)
        limiter.try_acquire()
        clock.advance(30)
        limiter.try_acquire()
        assert not limiter.can_make_request()
        clock.advance(30)  # first request is now exactly one window old
        assert limiter.can_make_request()

    def test_can_make_request_does_not_record(self):
        limiter = SlidingWindowRateLimiter(1, 60, clock=FakeClock())
        assert limiter.can_make_request()
        assert limiter.can_make_request()
        limiter.record_request()
        assert not limiter.can_make_request()

    def test_stats(self):
        limiter = SlidingWindowRateLimiter(2, 60, host="api.test", clock=FakeClock())
        limiter.try_acquire()
        limiter.try_acquire()
        limiter.try_acquire()
        stats = limiter.stats
        assert stats["host"] == "api.test"
        assert stats["in_window"] == 2
        assert stats["available"] == 0
        assert stats["total_admitted"] == 2
        assert stats["total_denied"] == 1

    def test_reset(self):
        limiter = SlidingWindowRateLimiter(1, 60, clock=FakeClock())
        limiter.try_acquire()
        limiter.reset()
        assert limiter.can_make_request()
        assert limiter.stats["total_admitted"] == 0

    def test_invalid_quota(self):
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(0, 60)
        with pytest.raises(ValueError):
            SlidingWindowRateLimiter(1, 0)

    def test_never_over_admits_under_threads(self):
        limiter = SlidingWindowRateLimiter(50, 60, clock=FakeClock())
        admitted = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                if limiter.try_acquire():
                    with lock:
                        admitted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(admitted) == 50


class TestRateLimiterRegistry:
    def test_default_quotas(self):
        registry = RateLimiterRegistry()
        assert registry.limiter_for("api.twitch.tv").max_requests == 800
        assert registry.limiter_for("www.googleapis.com").max_requests == 100

    def test_subdomain_shares_limiter(self):
        registry = RateLimiterRegistry()
        assert registry.limiter_for("youtube.googleapis.com") is registry.limiter_for(
            "googleapis.com"
        )

    def test_suffix_match_respects_dot_boundary(self):
        registry = RateLimiterRegistry()
        assert registry.resolve_key("notgoogleapis.com") == "notgoogleapis.com"

    def test_most_specific_wins(self):
        registry = RateLimiterRegistry(
            quotas={
                "example.com": RateLimitQuota(max_requests=10),
                "api.example.com": RateLimitQuota(max_requests=5),
            }
        )
        assert registry.resolve_key("v2.api.example.com") == "api.example.com"
        assert registry.limiter_for("v2.api.example.com").max_requests == 5

    def test_unregistered_host_gets_default(self):
        registry = RateLimiterRegistry(default_quota=RateLimitQuota(max_requests=7))
        limiter = registry.limiter_for("api.streamyyy.com")
        assert limiter.max_requests == 7
        assert registry.limiter_for("API.Streamyyy.com") is limiter

    def test_hosts_are_independent(self):
        clock = FakeClock()
        registry = RateLimiterRegistry(
            quotas={"a.test": RateLimitQuota(max_requests=1)}, clock=clock
        )
        assert registry.limiter_for("a.test").try_acquire()
        assert not registry.limiter_for("a.test").try_acquire()
        assert registry.limiter_for("b.test").try_acquire()

    def test_register_replaces(self):
        registry = RateLimiterRegistry()
        registry.register("api.twitch.tv", RateLimitQuota(max_requests=1))
        assert registry.limiter_for("api.twitch.tv").max_requests == 1

    def test_stats_by_host(self):
        registry = RateLimiterRegistry()
        registry.limiter_for("api.twitch.tv").try_acquire()
        assert registry.stats["api.twitch.tv"]["total_admitted"] == 1
