"""Error handling: exception hierarchy and retry classification."""

from streamnet.errors.exceptions import (
    DecodingError,
    EncodingError,
    InvalidURLError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    StreamNetError,
    TerminalError,
    TransientError,
    UnauthorizedError,
    UnknownError,
)

__all__ = [
    "StreamNetError",
    "TransientError",
    "TerminalError",
    "NetworkError",
    "ServerError",
    "InvalidURLError",
    "RateLimitedError",
    "UnauthorizedError",
    "NotFoundError",
    "DecodingError",
    "EncodingError",
    "UnknownError",
]
