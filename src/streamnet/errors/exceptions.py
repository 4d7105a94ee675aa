"""Custom exception hierarchy for streamnet."""

from __future__ import annotations


class StreamNetError(Exception):
    """Base exception for all streamnet errors."""

    error_type: str = "unknown"
    user_retryable: bool = False
    requires_reauth: bool = False
    # Set by the executor on the error that ended a retry loop
    attempts: int | None = None

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class TransientError(StreamNetError):
    """Transient error: safe to retry with backoff.

    Examples: 500/502/503 server error, timeout, connection error.
    """


class TerminalError(StreamNetError):
    """Terminal error: retrying the same request will not help.

    Examples: 401, 404, 429, bad URL, undecodable payload.
    """


class NetworkError(TransientError):
    """Transport-level failure, including offline and timeouts."""

    error_type = "network_error"
    user_retryable = True

    def __init__(self, message: str = "", cause: BaseException | None = None) -> None:
        super().__init__(message or _describe(cause) or "Network unavailable")
        self.cause = cause


class ServerError(TransientError):
    """HTTP 5xx."""

    error_type = "server_error"

    def __init__(self, http_status: int, message: str | None = None) -> None:
        super().__init__(message or f"Server error ({http_status})")
        self.http_status = http_status


class InvalidURLError(TerminalError):
    error_type = "invalid_url"

    def __init__(self, message: str = "Invalid URL", url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RateLimitedError(TerminalError):
    """HTTP 429, or the local limiter refused the request."""

    error_type = "rate_limited"
    user_retryable = True

    def __init__(
        self,
        message: str = "Too many requests. Please try again later.",
        host: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.host = host
        self.retry_after = retry_after
        self.http_status = 429


class UnauthorizedError(TerminalError):
    error_type = "unauthorized"
    requires_reauth = True

    def __init__(self, message: str = "Unauthorized access") -> None:
        super().__init__(message)
        self.http_status = 401


class NotFoundError(TerminalError):
    error_type = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)
        self.http_status = 404


class DecodingError(TerminalError):
    error_type = "decoding_error"

    def __init__(self, message: str = "Failed to decode response", cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class EncodingError(TerminalError):
    error_type = "encoding_error"

    def __init__(self, message: str = "Failed to encode request", cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class UnknownError(TerminalError):
    error_type = "unknown"

    def __init__(
        self,
        message: str = "An unknown error occurred",
        http_status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.cause = cause


def _describe(cause: BaseException | None) -> str:
    if cause is None:
        return ""
    text = str(cause)
    return text or type(cause).__name__
