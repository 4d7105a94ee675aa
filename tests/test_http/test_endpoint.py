"""Tests for endpoint descriptors and URL building."""

import pytest
from pydantic import ValidationError

from streamnet.errors.exceptions import InvalidURLError
from streamnet.http import endpoint as routes
from streamnet.http.endpoint import Endpoint, build_url
from streamnet.types import CachePolicy, HTTPMethod, UserProfile

BASE = "https://api.streamyyy.com"


class TestBuildUrl:
    def test_joins_path(self):
        url = build_url(BASE, Endpoint(path="/api/v1/streams/popular"))
        assert str(url) == "https://api.streamyyy.com/api/v1/streams/popular"

    def test_encodes_query(self):
        url = build_url(BASE, Endpoint(path="/search", query={"q": "speed run & chill"}))
        assert url.params["q"] == "speed run & chill"
        assert " " not in str(url)

    def test_base_path_replaced(self):
        url = build_url("https://api.streamyyy.com/ignored?x=1", Endpoint(path="/a"))
        assert str(url) == "https://api.streamyyy.com/a"

    def test_keeps_port(self):
        url = build_url("http://localhost:8080", Endpoint(path="/a"))
        assert url.port == 8080

    @pytest.mark.parametrize("base", ["", "not a url", "ftp://host", "/relative"])
    def test_invalid_base(self, base):
        with pytest.raises(InvalidURLError):
            build_url(base, Endpoint(path="/a"))

    @pytest.mark.parametrize("path", ["a/b", "/a b", ""])
    def test_invalid_path(self, path):
        with pytest.raises(InvalidURLError):
            build_url(BASE, Endpoint(path=path))


class TestEndpoint:
    def test_defaults(self):
        ep = Endpoint(path="/a")
        assert ep.method == HTTPMethod.GET
        assert ep.cache_policy == CachePolicy.NETWORK_ONLY
        assert ep.cache_ttl == 300.0

    def test_frozen(self):
        ep = Endpoint(path="/a")
        with pytest.raises(ValidationError):
            ep.path = "/b"

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_cache_ttl_must_be_positive(self, ttl):
        with pytest.raises(ValidationError):
            Endpoint(path="/a", cache_policy=CachePolicy.RELOAD_AND_STORE, cache_ttl=ttl)


class TestRoutes:
    def test_popular_streams_cached(self):
        ep = routes.popular_streams("twitch")
        assert ep.cache_policy == CachePolicy.RETURN_CACHE_ELSE_LOAD
        assert ep.query == {"platform": "twitch"}

    def test_popular_streams_all_platforms(self):
        assert routes.popular_streams().query == {}

    def test_search(self):
        ep = routes.search_streams("zelda", "youtube")
        assert ep.query == {"q": "zelda", "platform": "youtube"}

    def test_stream_statuses(self):
        ep = routes.stream_statuses(["s1", "s2"])
        assert ep.path == "/api/v1/streams/status"
        assert ep.query == {"ids": "s1,s2"}

    def test_stream_data(self):
        assert routes.stream_data("https://twitch.tv/x").query == {"url": "https://twitch.tv/x"}

    def test_user_profile_segment(self):
        assert routes.user_profile("u1").path == "/api/v1/users/u1"

    @pytest.mark.parametrize("user_id", ["", "..", "a/b"])
    def test_user_profile_rejects_bad_segment(self, user_id):
        with pytest.raises(InvalidURLError):
            routes.user_profile(user_id)

    def test_update_user_profile_is_put(self):
        profile = UserProfile(
            id="u1",
            email="a@b.test",
            full_name="A B",
            created_at="2024-01-01T00:00:00Z",
            updated_at="2024-01-02T00:00:00Z",
        )
        ep = routes.update_user_profile("u1", profile)
        assert ep.method == HTTPMethod.PUT
        assert ep.body == profile
