"""Wiring of network client, storage, worker, host and portal client.

:class:`OfflineSession` is what the CLI commands use; embedders with their
own event loop can use it the same way.

Example::

    async with OfflineSession(profile, config) as session:
        await session.start()
        async with session.portal() as client:
            response = await client.get("/api/members")
"""

from __future__ import annotations

from typing import Optional

import httpx

from vaultcache.client import PortalClient
from vaultcache.config import get_cache_dir
from vaultcache.host import WorkerHost, WorkerState
from vaultcache.models import GlobalConfig, Profile
from vaultcache.notifications import ClientShell, InMemoryShell
from vaultcache.storage import CacheStorage, DiskCacheStorage
from vaultcache.strategies import Clock, now_ms
from vaultcache.worker import OfflineCacheWorker


class OfflineSession:
    """Async context manager owning every moving part of one portal session.

    Args:
        profile: Portal origin and request settings.
        config: Supplies the cache and notification sections.
        storage: Cache storage; defaults to a :class:`DiskCacheStorage`
            in the user cache directory, closed on exit.
        shell: Notification/window surface; defaults to
            :class:`InMemoryShell`.
        transport: Upstream transport override (tests use
            :class:`httpx.MockTransport`).
        clock: Millisecond clock handed to the worker.
    """

    def __init__(
        self,
        profile: Profile,
        config: GlobalConfig,
        storage: Optional[CacheStorage] = None,
        shell: Optional[ClientShell] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = now_ms,
    ) -> None:
        self.profile = profile
        self.config = config
        self._owns_storage = storage is None
        self.storage = storage
        self.shell = shell or InMemoryShell()
        self._transport = transport
        self._clock = clock
        self.network: Optional[httpx.AsyncClient] = None
        self.worker: Optional[OfflineCacheWorker] = None
        self.host: Optional[WorkerHost] = None

    async def __aenter__(self) -> OfflineSession:
        request = self.profile.request
        self.network = httpx.AsyncClient(
            base_url=self.profile.base_url,
            timeout=request.timeout,
            verify=request.verify_ssl,
            transport=self._transport,
        )
        if self.storage is None:
            self.storage = DiskCacheStorage(get_cache_dir())
        self.worker = OfflineCacheWorker(
            self.network,
            self.storage,
            self.shell,
            config=self.config.cache,
            notifications=self.config.notifications,
            clock=self._clock,
        )
        self.host = WorkerHost(self.network)
        return self

    async def __aexit__(self, *args: object) -> None:
        if self.network is not None:
            await self.network.aclose()
            self.network = None
        if self._owns_storage and self.storage is not None:
            self.storage.close()
            self.storage = None

    async def start(self, reinstall: bool = False) -> WorkerState:
        """Bring the worker to ``activated``.

        Args:
            reinstall: Always run install, even when the static generation
                already exists.
        """
        assert self.host is not None and self.worker is not None, "Use as async context manager"
        if reinstall:
            return await self.host.register(self.worker)
        return await self.host.resume(self.worker)

    def portal(self, raise_for_status: bool = True) -> PortalClient:
        assert self.host is not None, "Use as async context manager"
        return PortalClient(self.profile, self.host, raise_for_status=raise_for_status)
