"""Tests for cache key helpers."""

from streamnet.cache.keys import (
    file_name_for,
    is_thumbnail_key,
    request_cache_key,
    thumbnail_key,
)


class TestThumbnailKeys:
    def test_prefix(self):
        assert thumbnail_key("abc") == "thumbnail_abc"

    def test_is_thumbnail_key(self):
        assert is_thumbnail_key(thumbnail_key("abc"))
        assert not is_thumbnail_key("abc")


class TestFileNameFor:
    def test_deterministic(self):
        assert file_name_for("k1") == file_name_for("k1")

    def test_different_keys_differ(self):
        assert file_name_for("k1") != file_name_for("k2")

    def test_filesystem_safe(self):
        name = file_name_for("api:GET:https://x.test/a/b?c=d")
        assert "/" not in name
        assert ":" not in name
        assert len(name) == 64


class TestRequestCacheKey:
    def test_includes_method_and_url(self):
        key = request_cache_key("get", "https://x.test/a?b=1")
        assert key == "api:GET:https://x.test/a?b=1"

    def test_query_distinguishes_keys(self):
        assert request_cache_key("GET", "https://x.test/a?b=1") != request_cache_key(
            "GET", "https://x.test/a?b=2"
        )
