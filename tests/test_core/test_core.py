"""Tests for the NetworkStack composition root."""

import json

import httpx

from streamnet.config import hierarchy
from streamnet.config.schema import NetworkSettings
from streamnet.core import NetworkStack
from streamnet.http.endpoint import Endpoint
from streamnet.types import CachePolicy


def _settings(tmp_path, **kwargs) -> NetworkSettings:
    return NetworkSettings(cache_dir=tmp_path / "cache", **kwargs)


class TestNetworkStack:
    def test_wires_components(self, tmp_path):
        stack = NetworkStack(_settings(tmp_path))
        assert stack.cache is not None
        assert stack.cache.root == tmp_path / "cache"
        assert stack.client.base_url == "https://api.streamyyy.com"
        assert stack.rate_limiters.limiter_for("api.twitch.tv").max_requests == 800

    def test_cache_disabled(self, tmp_path):
        stack = NetworkStack(_settings(tmp_path, cache_disabled=True))
        assert stack.cache is None

    def test_rate_limits_from_settings(self, tmp_path):
        stack = NetworkStack(
            _settings(
                tmp_path,
                rate_limits={"api.streamyyy.com": {"max_requests": 3}},
                rate_limit_max_requests=9,
            )
        )
        assert stack.rate_limiters.limiter_for("api.streamyyy.com").max_requests == 3
        assert stack.rate_limiters.limiter_for("other.test").max_requests == 9

    async def test_context_manager_runs_sweeper(self, tmp_path):
        async with NetworkStack(_settings(tmp_path)) as stack:
            assert stack.cache._sweeper is not None
        assert stack.cache._sweeper is None

    async def test_request_with_token_and_cache(self, tmp_path):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=json.dumps({"ok": True}).encode())

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        settings = _settings(tmp_path, base_url="https://api.test", api_token="tok")
        async with NetworkStack(settings, http_client=http) as stack:
            ep = Endpoint(path="/x", cache_policy=CachePolicy.RETURN_CACHE_ELSE_LOAD)
            assert await stack.client.request(ep) == {"ok": True}
            assert await stack.client.request(ep) == {"ok": True}
        await http.aclose()

        assert len(seen) == 1
        assert seen[0].headers["Authorization"] == "Bearer tok"

    def test_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "none.yaml")
        monkeypatch.chdir(tmp_path)
        stack = NetworkStack.from_config(
            base_url="http://localhost:1234", cache_dir=str(tmp_path / "c")
        )
        assert stack.settings.base_url == "http://localhost:1234"
        assert stack.cache.root == tmp_path / "c"
