"""Lifecycle host and httpx binding for :class:`~vaultcache.worker.OfflineCacheWorker`.

A browser drives a service worker through
``installing -> installed -> activating -> activated`` and decides when a
new version may take over.  :class:`WorkerHost` plays that part outside a
browser:

* :meth:`WorkerHost.register` installs a worker.  A failed install leaves
  the worker ``redundant`` and the previous version in charge.  A
  successful one activates immediately when the worker asked to skip
  waiting or nothing else is active, otherwise it waits for
  :meth:`WorkerHost.release_active`.
* :meth:`WorkerHost.resume` activates a worker whose static generation is
  already on disk, the way a browser restarts an installed worker.
* :class:`OfflineTransport` routes every request of an
  :class:`httpx.AsyncClient` through the active worker.

Example::

    network = httpx.AsyncClient(base_url=profile.base_url)
    host = WorkerHost(network)
    await host.register(OfflineCacheWorker(network, storage, shell))

    async with httpx.AsyncClient(
        base_url=profile.base_url, transport=OfflineTransport(host)
    ) as portal:
        members = await portal.get("/api/members")
"""

from __future__ import annotations

import enum
from typing import Optional

import httpx

from vaultcache.notifications import Notification, RawPayload
from vaultcache.output import debug, warning
from vaultcache.storage import CachedResponse
from vaultcache.worker import OfflineCacheWorker


class WorkerState(str, enum.Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class WorkerHost:
    """Owns the lifecycle of cache manager versions and dispatches events.

    Args:
        network: Client used for requests while no worker is active.
    """

    def __init__(self, network: httpx.AsyncClient) -> None:
        self._network = network
        self._states: dict[OfflineCacheWorker, WorkerState] = {}
        self.active: Optional[OfflineCacheWorker] = None
        self.waiting: Optional[OfflineCacheWorker] = None

    def state_of(self, worker: OfflineCacheWorker) -> WorkerState:
        return self._states.get(worker, WorkerState.PARSED)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def register(self, worker: OfflineCacheWorker) -> WorkerState:
        """Install *worker* and activate it when the lifecycle allows.

        Returns:
            The worker's state afterwards: ``activated`` or ``installed``
            (waiting).

        Raises:
            InstallError: Propagated from :meth:`OfflineCacheWorker.on_install`.
        """
        self._set(worker, WorkerState.INSTALLING)
        try:
            await worker.on_install()
        except BaseException:
            self._set(worker, WorkerState.REDUNDANT)
            raise
        self._set(worker, WorkerState.INSTALLED)

        if self.waiting is not None and self.waiting is not worker:
            self._set(self.waiting, WorkerState.REDUNDANT)
        self.waiting = worker

        if worker.skip_waiting_requested or self.active is None:
            await self._activate(worker)
        return self.state_of(worker)

    async def resume(self, worker: OfflineCacheWorker) -> WorkerState:
        """Activate *worker* without reinstalling if its static generation exists.

        Activation still runs, so generations left behind by a renamed API
        cache are purged.  Falls back to :meth:`register` when nothing has
        been installed yet.
        """
        if await worker.storage.has_generation(worker.config.static_cache_name):
            await self._activate(worker)
            debug(f"Resumed worker for {worker.config.static_cache_name}")
            return self.state_of(worker)
        return await self.register(worker)

    async def release_active(self) -> Optional[OfflineCacheWorker]:
        """Signal that the active version finished; promote the waiting worker."""
        if self.waiting is None:
            return None
        worker = self.waiting
        await self._activate(worker)
        return worker

    async def _activate(self, worker: OfflineCacheWorker) -> None:
        self.waiting = None
        self._set(worker, WorkerState.ACTIVATING)
        try:
            await worker.on_activate()
        except Exception as exc:
            # Activation failures do not block the new version.
            warning(f"Activation cleanup failed: {exc}")
        self._replace_active(worker)

    def _replace_active(self, worker: OfflineCacheWorker) -> None:
        previous = self.active
        if previous is not None and previous is not worker:
            self._set(previous, WorkerState.REDUNDANT)
        self.active = worker
        self._set(worker, WorkerState.ACTIVATED)

    def _set(self, worker: OfflineCacheWorker, state: WorkerState) -> None:
        self._states[worker] = state

    # ------------------------------------------------------------------ #
    # Event dispatch
    # ------------------------------------------------------------------ #

    async def fetch(self, request: httpx.Request) -> httpx.Response:
        if self.active is None:
            return await self._network.send(request)
        return await self.active.on_fetch(request)

    async def push(self, payload: RawPayload) -> Optional[Notification]:
        if self.active is None:
            return None
        return await self.active.on_push(payload)

    async def notification_click(self, notification: Notification) -> None:
        if self.active is not None:
            await self.active.on_notification_click(notification)


class OfflineTransport(httpx.AsyncBaseTransport):
    """httpx transport that sends every request through a :class:`WorkerHost`.

    Transport errors raised by the host (bypass route) reach the caller
    unchanged.
    """

    def __init__(self, host: WorkerHost) -> None:
        self._host = host

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await self._host.fetch(request)
        # Hand the outer client a detached copy; the body is already read
        # and decoded.
        return CachedResponse.from_response(response).to_response(request)
