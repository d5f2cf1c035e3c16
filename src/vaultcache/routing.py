"""Request classification: which caching policy applies to a request.

Three routes exist:

``BYPASS``
    API writes and any path containing an auth or payment segment.  Always sent
    to the network, never read from or written to a cache.
``NETWORK_FIRST``
    API reads.  Fresh data when online, a bounded-age cached copy when not.
``CACHE_FIRST``
    Everything outside the API prefix (the app shell and static assets).

Example::

    >>> classify_request("GET", "https://portal.example.org/api/members", OfflineCacheConfig())
    <Route.NETWORK_FIRST: 'network-first'>
    >>> classify_request("POST", "/api/auth/login", OfflineCacheConfig())
    <Route.BYPASS: 'bypass'>
"""

from __future__ import annotations

import enum

import httpx

from vaultcache.models import OfflineCacheConfig


class Route(str, enum.Enum):
    BYPASS = "bypass"
    NETWORK_FIRST = "network-first"
    CACHE_FIRST = "cache-first"


def request_path(url: str | httpx.URL) -> str:
    """Return the path component of *url* (absolute or path-only)."""
    return httpx.URL(str(url)).path or "/"


def is_api_path(path: str, config: OfflineCacheConfig) -> bool:
    return path.startswith(config.api_prefix)


def is_never_cached(method: str, path: str, config: OfflineCacheConfig) -> bool:
    """True for non-GET methods and for paths containing a never-cache segment."""
    if method.upper() != "GET":
        return True
    return any(segment in path for segment in config.never_cache_segments)


def classify_request(method: str, url: str | httpx.URL, config: OfflineCacheConfig) -> Route:
    """Pick the caching policy for a request.

    Args:
        method: HTTP method, any case.
        url: Absolute URL or bare path.
        config: Supplies the API prefix and the never-cache segments.
    """
    path = request_path(url)
    if any(segment in path for segment in config.never_cache_segments):
        return Route.BYPASS
    if not is_api_path(path, config):
        return Route.CACHE_FIRST
    if is_never_cached(method, path, config):
        return Route.BYPASS
    return Route.NETWORK_FIRST
