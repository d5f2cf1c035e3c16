"""Portal API client for vaultcache.

:class:`PortalClient` is the page-side caller of the backend: it sends its
requests through :class:`~vaultcache.host.OfflineTransport`, so every call
is subject to the cache manager's routing, and maps error statuses onto the
:mod:`vaultcache.exceptions` hierarchy.

Example::

    from vaultcache.client import PortalClient

    async with PortalClient(profile, host) as client:
        resp = await client.get("/api/members")
"""

from vaultcache.client.portal import PortalClient
from vaultcache.client.response import extract_response_data, format_api_response

__all__ = ["PortalClient", "extract_response_data", "format_api_response"]
