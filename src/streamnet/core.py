"""Top-level entry points: NetworkStack and the fetch() convenience wrapper."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from streamnet.cache.manager import PersistentCache
from streamnet.client import APIClient
from streamnet.concurrency.rate_limiter import RateLimiterRegistry
from streamnet.config.schema import NetworkSettings, load_settings
from streamnet.connectivity.monitor import ConnectivityMonitor
from streamnet.http.endpoint import Endpoint
from streamnet.http.executor import RequestExecutor
from streamnet.types import CachePolicy

logger = logging.getLogger(__name__)


class NetworkStack:
    """Builds and owns one monitor, cache, limiter registry, executor and client.

    Create it once per process and share ``stack.client``. Use it as an async
    context manager (or call ``start()``/``close()``) so the cache sweeper and
    the HTTP connection pool are started and released together.
    """

    def __init__(
        self,
        settings: NetworkSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        monitor: ConnectivityMonitor | None = None,
    ) -> None:
        self._settings = settings or NetworkSettings()
        s = self._settings

        self._monitor = monitor or ConnectivityMonitor()

        self._cache: PersistentCache | None = None
        if not s.cache_disabled:
            self._cache = PersistentCache(
                root=s.cache_dir,
                memory_max_items=s.cache_memory_items,
                memory_max_mb=s.cache_memory_mb,
            )

        quotas = s.rate_limits if s.rate_limits else None
        self._rate_limiters = RateLimiterRegistry(quotas=quotas, default_quota=s.default_quota)

        self._executor = RequestExecutor(
            http_client=http_client,
            timeouts=s.timeouts,
            retry_config=s.retry,
        )

        token = s.api_token
        self._client = APIClient(
            base_url=s.base_url,
            monitor=self._monitor,
            executor=self._executor,
            rate_limiters=self._rate_limiters,
            cache=self._cache,
            credential_provider=(lambda: token) if token else None,
        )
        self._started = False

    @classmethod
    def from_config(cls, **overrides: Any) -> NetworkStack:
        """Build a stack from defaults → YAML → env → ``overrides``."""
        return cls(load_settings(**overrides))

    @property
    def settings(self) -> NetworkSettings:
        return self._settings

    @property
    def monitor(self) -> ConnectivityMonitor:
        return self._monitor

    @property
    def cache(self) -> PersistentCache | None:
        return self._cache

    @property
    def rate_limiters(self) -> RateLimiterRegistry:
        return self._rate_limiters

    @property
    def client(self) -> APIClient:
        return self._client

    async def start(self) -> None:
        """Start background work. Idempotent."""
        if self._started:
            return
        if self._cache is not None:
            self._cache.start_sweeper(self._settings.cache_sweep_interval)
        self._started = True
        logger.debug("Network stack started for %s", self._settings.base_url)

    async def close(self) -> None:
        if self._cache is not None:
            await self._cache.stop_sweeper()
        await self._client.close()
        self._started = False

    async def __aenter__(self) -> NetworkStack:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


# ── Module-level convenience functions ──


def fetch(
    path: str,
    query: dict[str, str] | None = None,
    cache_policy: CachePolicy = CachePolicy.NETWORK_ONLY,
    no_cache: bool = False,
    **overrides: Any,
) -> Any:
    """GET ``path`` from the configured base URL and return the decoded JSON (sync wrapper)."""
    stack = NetworkStack.from_config(cache_disabled=no_cache or None, **overrides)
    endpoint = Endpoint(path=path, query=query or {}, cache_policy=cache_policy)

    async def _run() -> Any:
        async with stack:
            return await stack.client.request(endpoint)

    return asyncio.run(_run())
