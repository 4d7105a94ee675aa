"""API client: the single entry point for fetching data from upstream APIs."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar, overload

from streamnet.cache.keys import request_cache_key
from streamnet.cache.manager import PersistentCache
from streamnet.concurrency.rate_limiter import RateLimiterRegistry
from streamnet.config.defaults import DEFAULT_USER_AGENT
from streamnet.connectivity.monitor import ConnectivityMonitor
from streamnet.errors.exceptions import NetworkError, RateLimitedError, StreamNetError
from streamnet.http import endpoint as routes
from streamnet.http.codec import decode_body, encode_body
from streamnet.http.endpoint import Endpoint, build_url
from streamnet.http.executor import RequestExecutor
from streamnet.types import (
    CachePolicy,
    HTTPMethod,
    NetworkMetrics,
    RequestMetrics,
    StreamData,
    StreamStatus,
    UserProfile,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STATUS_POLL_INTERVAL = 30.0

CredentialProvider = Callable[[], "str | None | Awaitable[str | None]"]


class APIClient:
    """Composes connectivity gating, per-host rate limiting, retrying
    execution and optional response caching into one ``request()`` call.

    Per call: build URL → (cache) → connectivity → rate limiter → execute →
    decode → (cache store). Retries happen inside the executor; the
    connectivity and rate-limit checks run once per logical request.
    """

    def __init__(
        self,
        base_url: str,
        monitor: ConnectivityMonitor,
        executor: RequestExecutor,
        rate_limiters: RateLimiterRegistry | None = None,
        cache: PersistentCache | None = None,
        credential_provider: CredentialProvider | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url
        self._monitor = monitor
        self._executor = executor
        self._rate_limiters = rate_limiters or RateLimiterRegistry()
        self._cache = cache
        self._credential_provider = credential_provider
        self._user_agent = user_agent

        self._metrics_lock = threading.Lock()
        self._active_requests = 0
        self._total_requests = 0
        self._successful_requests = 0
        self._failed_requests = 0

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def rate_limiters(self) -> RateLimiterRegistry:
        return self._rate_limiters

    @overload
    async def request(
        self,
        endpoint: Endpoint,
        response_type: type[T],
        retry_count: int | None = None,
        cache_policy: CachePolicy | None = None,
    ) -> T: ...

    @overload
    async def request(
        self,
        endpoint: Endpoint,
        response_type: None = None,
        retry_count: int | None = None,
        cache_policy: CachePolicy | None = None,
    ) -> Any: ...

    async def request(
        self,
        endpoint: Endpoint,
        response_type: Any = None,
        retry_count: int | None = None,
        cache_policy: CachePolicy | None = None,
    ) -> Any:
        """Perform one logical API call and return the decoded response.

        Args:
            endpoint: What to call.
            response_type: Type to validate the JSON body into (None → plain JSON).
            retry_count: Retries for transient failures (default from config).
            cache_policy: Overrides ``endpoint.cache_policy``.

        Raises the classified StreamNetError on failure.
        """
        url = build_url(self._base_url, endpoint)
        policy = cache_policy or endpoint.cache_policy
        cacheable = self._cache is not None and endpoint.method == HTTPMethod.GET
        cache_key = request_cache_key(endpoint.method, str(url))

        if cacheable and policy == CachePolicy.RETURN_CACHE_ELSE_LOAD:
            cached = await asyncio.to_thread(self._cache.retrieve, cache_key, response_type)
            if cached is not None:
                logger.debug("Cache hit for %s", cache_key)
                return cached

        if not self._monitor.current_state().is_connected:
            logger.debug("Offline, refusing %s %s", endpoint.method, url)
            raise NetworkError("Not connected to the internet")

        host = url.host
        if not self._rate_limiters.limiter_for(host).try_acquire():
            logger.info("Local rate limit reached for %s", host)
            raise RateLimitedError(host=host)

        self._begin()
        succeeded = False
        try:
            content = encode_body(endpoint.body) if endpoint.body is not None else None
            headers = await self._build_headers(endpoint, has_body=content is not None)
            request = self._executor.build_request(endpoint.method, url, headers, content)
            started = time.monotonic()
            data = await self._executor.execute(request, retry_count)
            self._monitor.record_latency(time.monotonic() - started)
            value = decode_body(data, response_type)
            succeeded = True
        finally:
            self._finish(succeeded)

        if cacheable and policy != CachePolicy.NETWORK_ONLY:
            await self._store_response(cache_key, data, endpoint.cache_ttl)
        return value

    # ── Typed operations ──

    async def fetch_stream_data(self, url: str) -> StreamData:
        return await self.request(routes.stream_data(url), StreamData)

    async def fetch_popular_streams(self, platform: str | None = None) -> list[StreamData]:
        return await self.request(routes.popular_streams(platform), list[StreamData])

    async def search_streams(self, query: str, platform: str | None = None) -> list[StreamData]:
        return await self.request(routes.search_streams(query, platform), list[StreamData])

    async def fetch_user_profile(self, user_id: str) -> UserProfile:
        return await self.request(routes.user_profile(user_id), UserProfile)

    async def update_user_profile(self, user_id: str, profile: UserProfile) -> UserProfile:
        return await self.request(routes.update_user_profile(user_id, profile), UserProfile)

    async def fetch_stream_statuses(self, stream_ids: list[str]) -> list[StreamStatus]:
        if not stream_ids:
            return []
        return await self.request(routes.stream_statuses(stream_ids), list[StreamStatus])

    async def watch_stream_statuses(
        self,
        stream_ids: list[str],
        interval: float = _STATUS_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> AsyncIterator[list[StreamStatus]]:
        """Yield the statuses of ``stream_ids`` now and then every ``interval`` seconds.

        A failed poll is logged and skipped; the next tick tries again.
        Polling stops when the consumer stops iterating or is cancelled.
        """
        while True:
            try:
                statuses = await self.fetch_stream_statuses(stream_ids)
            except StreamNetError as e:
                logger.warning("Stream status poll failed: %s", e)
            else:
                yield statuses
            await sleep(interval)

    def start_status_polling(
        self,
        stream_ids: list[str],
        on_update: Callable[[list[StreamStatus]], None],
        interval: float = _STATUS_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> asyncio.Task[None]:
        """Run ``watch_stream_statuses`` in a background task; cancel it to stop."""

        async def _run() -> None:
            async for statuses in self.watch_stream_statuses(stream_ids, interval, sleep):
                try:
                    on_update(statuses)
                except Exception:
                    logger.exception("Stream status listener %r failed", on_update)

        return asyncio.create_task(_run(), name="streamnet-status-poller")

    # ── Metrics ──

    def request_metrics(self) -> RequestMetrics:
        with self._metrics_lock:
            return RequestMetrics(
                active_requests=self._active_requests,
                total_requests=self._total_requests,
                successful_requests=self._successful_requests,
                failed_requests=self._failed_requests,
            )

    @property
    def success_rate(self) -> float:
        return self.request_metrics().success_rate

    @property
    def error_rate(self) -> float:
        return self.request_metrics().error_rate

    def metrics(self) -> NetworkMetrics:
        """Snapshot of request counters plus cache figures."""
        counters = self.request_metrics()
        cache_stats = self._cache.stats() if self._cache is not None else None
        return NetworkMetrics(
            active_requests=counters.active_requests,
            total_requests=counters.total_requests,
            successful_requests=counters.successful_requests,
            failed_requests=counters.failed_requests,
            success_rate=counters.success_rate,
            error_rate=counters.error_rate,
            cache_hit_rate=cache_stats.hit_rate if cache_stats else 0.0,
            cache_size=cache_stats.size_bytes if cache_stats else 0,
        )

    async def close(self) -> None:
        await self._executor.close()

    # ── Internals ──

    def _begin(self) -> None:
        with self._metrics_lock:
            self._active_requests += 1
            self._total_requests += 1
        self._monitor.record_request()

    def _finish(self, succeeded: bool) -> None:
        with self._metrics_lock:
            self._active_requests -= 1
            if succeeded:
                self._successful_requests += 1
            else:
                self._failed_requests += 1
        if not succeeded:
            self._monitor.record_error()

    async def _store_response(self, key: str, data: bytes, ttl: float) -> None:
        try:
            await asyncio.to_thread(self._cache.store_encoded, key, data, ttl)
        except (OSError, ValueError) as e:
            logger.warning("Not caching %s: %s", key, e)

    async def _build_headers(self, endpoint: Endpoint, has_body: bool) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }
        headers.update(endpoint.headers)
        if has_body:
            headers.setdefault("Content-Type", "application/json")

        token = await self._resolve_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _resolve_token(self) -> str | None:
        if self._credential_provider is None:
            return None
        token = self._credential_provider()
        if inspect.isawaitable(token):
            token = await token
        return token
