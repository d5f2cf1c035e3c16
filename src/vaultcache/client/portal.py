"""Asynchronous portal client routed through the offline cache manager.

Wraps :class:`httpx.AsyncClient` with an
:class:`~vaultcache.host.OfflineTransport` and turns HTTP error statuses
into typed exceptions.  Retries are intentionally absent: the cache
manager already converts a failed API read into a cached copy or a 503.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from vaultcache.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from vaultcache.host import OfflineTransport, WorkerHost
from vaultcache.models import Profile
from vaultcache.output import get_output


class PortalClient:
    """Asynchronous client for the portal's ``/api/`` endpoints.

    Must be used as an async context manager.

    Args:
        profile: Supplies ``base_url`` and the request timeout.
        host: Lifecycle host whose active worker answers every request.
        raise_for_status: When ``False``, error responses are returned
            instead of raised.
    """

    def __init__(
        self,
        profile: Profile,
        host: WorkerHost,
        raise_for_status: bool = True,
    ) -> None:
        self._profile = profile
        self._host = host
        self._raise_for_status = raise_for_status
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> PortalClient:
        self._client = httpx.AsyncClient(
            base_url=self._profile.base_url,
            timeout=self._profile.request.timeout,
            transport=OfflineTransport(self._host),
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        body: Optional[str] = None,
    ) -> httpx.Response:
        """Send a request through the cache manager.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: URL path appended to the profile's ``base_url``.
            params: Query parameters.
            headers: Extra request headers.
            json_body: JSON-serialisable body.
            body: Raw string body.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On 5xx, including the offline 503.
            ConnectionError_: When a bypassed request cannot reach the
                network.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if json_body is not None:
            kwargs["json"] = json_body
        elif body is not None:
            kwargs["content"] = body

        try:
            response = await self._client.request(method.upper(), path, **kwargs)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"{method.upper()} {path} failed: {exc}") from exc

        get_output().debug(f"{method.upper()} {path} -> {response.status_code}")
        if self._raise_for_status:
            self.raise_for_error(response)
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    def raise_for_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
