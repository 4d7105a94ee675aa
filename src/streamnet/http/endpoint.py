"""Endpoint descriptors and URL building for the Streamyyy REST API."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from streamnet.errors.exceptions import InvalidURLError
from streamnet.types import CachePolicy, HTTPMethod, UserProfile

_ALLOWED_SCHEMES = {"http", "https"}


class Endpoint(BaseModel):
    """Immutable description of one logical API call."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod = HTTPMethod.GET
    headers: dict[str, str] = Field(default_factory=dict)
    query: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    cache_policy: CachePolicy = CachePolicy.NETWORK_ONLY
    cache_ttl: float = Field(default=300.0, gt=0)


def build_url(base_url: str, endpoint: Endpoint) -> httpx.URL:
    """Join ``base_url`` and the endpoint path/query into an absolute URL.

    Raises InvalidURLError instead of returning a half-built URL.
    """
    try:
        base = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidURLError(f"Invalid base URL: {base_url!r}", url=base_url) from e
    if base.scheme not in _ALLOWED_SCHEMES or not base.host:
        raise InvalidURLError(f"Base URL must be absolute http(s): {base_url!r}", url=base_url)

    path = endpoint.path
    if not path.startswith("/") or any(c.isspace() for c in path):
        raise InvalidURLError(f"Invalid endpoint path: {path!r}", url=path)

    try:
        url = base.copy_with(path=path, query=None, fragment=None)
        if endpoint.query:
            url = url.copy_merge_params(endpoint.query)
    except (httpx.InvalidURL, ValueError, TypeError) as e:
        raise InvalidURLError(f"Invalid URL for path {path!r}", url=path) from e
    return url


# ── Streamyyy API routes ──


def stream_data(url: str) -> Endpoint:
    return Endpoint(path="/api/v1/streams/data", query={"url": url})


def popular_streams(platform: str | None = None) -> Endpoint:
    query = {"platform": platform} if platform else {}
    return Endpoint(
        path="/api/v1/streams/popular",
        query=query,
        cache_policy=CachePolicy.RETURN_CACHE_ELSE_LOAD,
        cache_ttl=300.0,
    )


def search_streams(query: str, platform: str | None = None) -> Endpoint:
    params = {"q": query}
    if platform:
        params["platform"] = platform
    return Endpoint(path="/api/v1/streams/search", query=params)


def stream_statuses(stream_ids: list[str]) -> Endpoint:
    return Endpoint(path="/api/v1/streams/status", query={"ids": ",".join(stream_ids)})


def user_profile(user_id: str) -> Endpoint:
    return Endpoint(path=f"/api/v1/users/{_segment(user_id)}")


def update_user_profile(user_id: str, profile: UserProfile) -> Endpoint:
    return Endpoint(
        path=f"/api/v1/users/{_segment(user_id)}",
        method=HTTPMethod.PUT,
        body=profile,
    )


def _segment(value: str) -> str:
    if not value or "/" in value or value in {".", ".."}:
        raise InvalidURLError(f"Invalid path segment: {value!r}", url=value)
    return value
