"""Async HTTP executor wrapping httpx with per-attempt timeouts and retry."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

import httpx

from streamnet.errors.exceptions import StreamNetError
from streamnet.errors.retry import build_retrying, classify_status, classify_transport_error
from streamnet.types import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

_MAX_CONNECTIONS_PER_HOST = 6


class RequestExecutor:
    """Sends one request, retrying transient failures, and returns the body.

    Connectivity and rate limiting are the caller's business; this class
    only talks HTTP and classifies what comes back.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeouts: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._timeouts = timeouts or TimeoutConfig()
        self._retry_config = retry_config or RetryConfig()
        self._sleep = sleep
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeouts.request_seconds),
            limits=httpx.Limits(max_connections=_MAX_CONNECTIONS_PER_HOST * 4),
            follow_redirects=True,
        )

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    def build_request(
        self,
        method: str,
        url: httpx.URL | str,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
    ) -> httpx.Request:
        return self._client.build_request(
            method,
            url,
            headers=dict(headers or {}),
            content=content,
            timeout=httpx.Timeout(self._timeouts.request_seconds),
        )

    async def execute(self, request: httpx.Request, retry_count: int | None = None) -> bytes:
        """Send ``request`` with up to ``retry_count`` retries; return the body bytes.

        Raises the classified StreamNetError of the last attempt.
        """
        body, _ = await self.execute_counted(request, retry_count)
        return body

    async def execute_counted(
        self, request: httpx.Request, retry_count: int | None = None
    ) -> tuple[bytes, int]:
        """Like ``execute`` but also returns the number of attempts made.

        On failure the raised error carries the count as ``attempts``.
        """
        if retry_count is None:
            retry_count = self._retry_config.max_retries
        attempts = 0
        body = b""
        try:
            async for attempt in build_retrying(retry_count, self._retry_config, self._sleep):
                with attempt:
                    attempts += 1
                    body = await self._send_once(request)
        except StreamNetError as e:
            e.attempts = attempts
            raise
        return body, attempts

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _send_once(self, request: httpx.Request) -> bytes:
        logger.debug("%s %s", request.method, request.url)
        try:
            async with asyncio.timeout(self._timeouts.resource_seconds):
                response = await self._client.send(request)
        except (httpx.RequestError, TimeoutError) as e:
            raise classify_transport_error(e) from e

        error = classify_status(response)
        if error is not None:
            logger.debug("%s %s -> %d", request.method, request.url, response.status_code)
            raise error
        return response.content
