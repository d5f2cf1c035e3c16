"""Serialisable snapshot of an HTTP response stored in a cache generation."""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import BaseModel, Field


_RECOMPUTED_HEADERS = ("content-encoding", "content-length", "transfer-encoding")


def make_cache_key(method: str, url: str | httpx.URL) -> str:
    """Build the request identity used as a cache key: ``"GET https://host/path?q"``."""
    return f"{method.upper()} {url}"


class CachedResponse(BaseModel):
    """A fully-read response, detached from any connection.

    Headers are kept as an ordered list of pairs so that repeated headers
    (``Set-Cookie``, ``Vary``) survive the round trip through storage.
    """

    url: str
    method: str = "GET"
    status_code: int
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""

    @classmethod
    def from_response(
        cls,
        response: httpx.Response,
        extra_headers: Optional[dict[str, str]] = None,
    ) -> CachedResponse:
        """Snapshot an already-read *response*.

        Args:
            response: A response whose body has been read
                (``await response.aread()``).
            extra_headers: Headers to set on the stored copy only, replacing
                any header of the same name.
        """
        headers = [(k, v) for k, v in response.headers.multi_items()]
        if extra_headers:
            lowered = {name.lower() for name in extra_headers}
            headers = [(k, v) for k, v in headers if k.lower() not in lowered]
            headers.extend(extra_headers.items())
        return cls(
            url=str(response.request.url),
            method=response.request.method,
            status_code=response.status_code,
            headers=headers,
            body=response.content,
        )

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    def cached_at(self, header: str) -> Optional[int]:
        """Return the storage timestamp (ms since epoch) or ``None`` if absent or garbled."""
        raw = self.header(header)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def age_ms(self, now: int, header: str) -> Optional[int]:
        """Milliseconds elapsed since storage, or ``None`` without a usable timestamp."""
        cached_at = self.cached_at(header)
        if cached_at is None:
            return None
        return now - cached_at

    def to_response(self, request: Optional[httpx.Request] = None) -> httpx.Response:
        """Rebuild a fresh :class:`httpx.Response`; each call returns an independent copy."""
        # The stored body is already decoded; httpx recomputes the length.
        headers = [
            (k, v) for k, v in self.headers
            if k.lower() not in _RECOMPUTED_HEADERS
        ]
        return httpx.Response(
            status_code=self.status_code,
            headers=headers,
            content=self.body,
            request=request or httpx.Request(self.method, self.url),
        )
