"""Retry policy: HTTP/transport classification and backoff for request attempts."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections.abc import Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from streamnet.errors.exceptions import (
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    StreamNetError,
    TransientError,
    UnauthorizedError,
    UnknownError,
)
from streamnet.types import RetryConfig, RetryStrategy

logger = logging.getLogger(__name__)

_MAX_WAIT = 60.0  # seconds


def classify_status(response: httpx.Response) -> StreamNetError | None:
    """Map an HTTP response to an error, or None for 2xx."""
    status = response.status_code
    if 200 <= status <= 299:
        return None
    if status == 401:
        return UnauthorizedError()
    if status == 404:
        return NotFoundError()
    if status == 429:
        retry_after = None
        retry_after_str = response.headers.get("retry-after")
        if retry_after_str:
            with contextlib.suppress(ValueError):
                retry_after = float(retry_after_str)
        return RateLimitedError(host=response.request.url.host, retry_after=retry_after)
    if 500 <= status <= 599:
        return ServerError(status)
    return UnknownError(f"Unexpected HTTP status {status}", http_status=status)


def classify_transport_error(exc: Exception) -> StreamNetError:
    """Convert an httpx request failure (or a timeout) to a streamnet error.

    Transport failures and timeouts become the retried NetworkError. Any
    other httpx request error (redirect loops, bad content encoding) is an
    UnknownError.
    """
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return NetworkError(f"Request timed out: {exc}".rstrip(": "), cause=exc)
    if isinstance(exc, httpx.TransportError) or not isinstance(exc, httpx.RequestError):
        return NetworkError(cause=exc)
    return UnknownError(f"Request failed: {str(exc) or type(exc).__name__}", cause=exc)


def compute_wait(
    attempt: int,
    strategy: RetryStrategy = RetryStrategy.EXPONENTIAL,
    initial_wait: float = 0.5,
    jitter: bool = False,
) -> float:
    """Compute wait time before retry number ``attempt`` (0-based)."""
    if strategy == RetryStrategy.EXPONENTIAL:
        wait = initial_wait * (2**attempt)
    elif strategy == RetryStrategy.LINEAR:
        wait = initial_wait * (attempt + 1)
    else:  # FIXED
        wait = initial_wait

    if jitter:
        wait += random.uniform(0, wait * 0.25)

    return min(wait, _MAX_WAIT)


def build_retrying(
    retry_count: int,
    config: RetryConfig | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncRetrying:
    """Build a tenacity controller: 1 initial attempt + ``retry_count`` retries.

    Only TransientError is retried. The wait is deterministic unless
    jitter is enabled in the config.
    """
    config = config or RetryConfig()

    def _wait(state: RetryCallState) -> float:
        return compute_wait(
            state.attempt_number - 1,
            config.strategy,
            config.initial_wait,
            config.jitter,
        )

    def _log_retry(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        logger.warning(
            "Transient error (attempt %d/%d): %s. Retrying in %.2fs",
            state.attempt_number,
            retry_count + 1,
            getattr(exc, "error_type", type(exc).__name__),
            state.upcoming_sleep,
        )

    return AsyncRetrying(
        retry=retry_if_exception_type(TransientError),
        stop=stop_after_attempt(max(retry_count, 0) + 1),
        wait=_wait,
        sleep=sleep,
        before_sleep=_log_retry,
        reraise=True,
    )
