"""Tests for cache entry and stats models."""

import time

from streamnet.cache.stats import CacheEntry, CacheStats


class TestCacheEntry:
    def test_is_expired_false_when_fresh(self):
        entry = CacheEntry(key="k1", payload=b"x", expires_at=time.time() + 60)
        assert not entry.is_expired

    def test_is_expired_true_when_past(self):
        entry = CacheEntry(key="k1", payload=b"x", expires_at=time.time() - 1)
        assert entry.is_expired

    def test_created_at_defaults_to_now(self):
        before = time.time()
        entry = CacheEntry(key="k1", payload=b"", expires_at=before + 1)
        assert before <= entry.created_at <= time.time()

    def test_size_bytes(self):
        entry = CacheEntry(key="k1", payload=b"hello world", expires_at=0)
        assert entry.size_bytes == 11


class TestCacheStats:
    def test_defaults(self):
        stats = CacheStats()
        assert stats.hits == 0
        assert stats.misses == 0
        assert stats.entries == 0

    def test_hit_rate_zero_when_no_requests(self):
        assert CacheStats().hit_rate == 0.0

    def test_hit_rate_calculation(self):
        stats = CacheStats(hits=3, misses=1)
        assert stats.hit_rate == 0.75

    def test_size_mb(self):
        stats = CacheStats(size_bytes=2 * 1024 * 1024)
        assert stats.size_mb == 2.0
