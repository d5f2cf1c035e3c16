"""The offline response cache manager.

:class:`OfflineCacheWorker` reacts to five host events:

``on_install``
    Fetch the static manifest and store it in the static generation.  All
    assets must arrive with a 2xx status or nothing is stored and
    :class:`~vaultcache.exceptions.InstallError` propagates.  A successful
    install requests skip-waiting.
``on_activate``
    Purge every generation that is neither the current static nor the
    current API generation, then claim the open windows.
``on_fetch``
    Classify the request (:mod:`vaultcache.routing`) and hand it to the
    matching strategy (:mod:`vaultcache.strategies`).
``on_push``
    Show a notification built from the push payload.
``on_notification_click``
    Focus the window already showing the notification's target URL, or
    open a new one.

The worker keeps no mutable state of its own besides the skip-waiting
flag; everything else lives in the :class:`~vaultcache.storage.CacheStorage`
it is given.  The lifecycle that decides *when* these handlers run belongs
to :class:`~vaultcache.host.WorkerHost`.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from vaultcache.exceptions import InstallError
from vaultcache.models import NotificationConfig, NotificationOptions, OfflineCacheConfig
from vaultcache.notifications import ClientShell, Notification, RawPayload, parse_push_payload
from vaultcache.output import debug
from vaultcache.routing import Route, classify_request
from vaultcache.storage import CacheStorage, CachedResponse, make_cache_key
from vaultcache.strategies import CacheFirst, Clock, NetworkFirst, NetworkOnly, now_ms


class OfflineCacheWorker:
    """Cache manager bound to one portal origin.

    Args:
        network: Client for upstream requests.  Its ``base_url`` must be the
            portal origin; manifest paths are resolved against it.
        storage: Cache storage substrate.
        shell: Notification and window surface.
        config: Generation names and caching behaviour.
        notifications: Defaults for push notifications.
        clock: Current time in milliseconds; injectable for tests.

    Example::

        async with httpx.AsyncClient(base_url="https://portal.example.org") as network:
            worker = OfflineCacheWorker(network, MemoryCacheStorage(), InMemoryShell())
            await worker.on_install()
            await worker.on_activate()
            response = await worker.on_fetch(network.build_request("GET", "/api/members"))
    """

    def __init__(
        self,
        network: httpx.AsyncClient,
        storage: CacheStorage,
        shell: ClientShell,
        config: Optional[OfflineCacheConfig] = None,
        notifications: Optional[NotificationConfig] = None,
        clock: Clock = now_ms,
    ) -> None:
        self._network = network
        self._storage = storage
        self._shell = shell
        self._config = config or OfflineCacheConfig()
        self._notifications = notifications or NotificationConfig()
        self.skip_waiting_requested = False

        self._strategies = {
            Route.BYPASS: NetworkOnly(network),
            Route.NETWORK_FIRST: NetworkFirst(network, storage, self._config, clock),
            Route.CACHE_FIRST: CacheFirst(network, storage, self._config),
        }

    @property
    def config(self) -> OfflineCacheConfig:
        return self._config

    @property
    def storage(self) -> CacheStorage:
        return self._storage

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def on_install(self) -> None:
        """Populate the static generation with the full manifest.

        Raises:
            InstallError: If any manifest asset fails to download or
                answers with a non-2xx status.  Nothing is stored then.
        """
        manifest = self._config.static_assets
        results = await asyncio.gather(
            *(self._fetch_asset(path) for path in manifest), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        generation = await self._storage.open_generation(self._config.static_cache_name)
        for key, response in results:
            await generation.put(key, CachedResponse.from_response(response))
        debug(f"Installed {len(results)} assets into {generation.name}")

        self.skip_waiting_requested = True

    async def on_activate(self) -> list[str]:
        """Delete stale generations and take control of open windows.

        Returns:
            Names of the generations that were purged.
        """
        keep = {self._config.static_cache_name, self._config.api_cache_name}
        stale = [name for name in await self._storage.generation_names() if name not in keep]
        await asyncio.gather(*(self._storage.delete_generation(name) for name in stale))
        for name in stale:
            debug(f"Purged stale generation {name}")

        await self._shell.claim()
        return stale

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def route_for(self, request: httpx.Request) -> Route:
        return classify_request(request.method, request.url, self._config)

    async def on_fetch(self, request: httpx.Request) -> httpx.Response:
        """Answer an intercepted request according to its route.

        Raises:
            httpx.TransportError: Only on the bypass route, or on the
                cache-first route when the offline page is missing too.
        """
        route = self.route_for(request)
        debug(f"{request.method} {request.url} -> {route.value}")
        return await self._strategies[route].handle(request)

    # ------------------------------------------------------------------ #
    # Notifications
    # ------------------------------------------------------------------ #

    async def on_push(self, payload: RawPayload) -> Optional[Notification]:
        """Display the notification carried by a push message.

        Returns:
            The displayed notification, or ``None`` for an empty message.

        Raises:
            PushPayloadError: If the payload is not a JSON object.
        """
        message = parse_push_payload(payload)
        if message is None:
            return None
        options = NotificationOptions.from_payload(message, self._notifications)
        title = message.title or self._notifications.title
        return await self._shell.show_notification(title, options)

    async def on_notification_click(self, notification: Notification) -> None:
        """Close *notification* and bring its target URL to the front."""
        notification.close()
        target = notification.data.get("url") or self._notifications.default_url

        for window in await self._shell.match_windows(include_uncontrolled=True):
            if window.url == target and window.focusable:
                await window.focus()
                return

        if self._shell.can_open_windows:
            await self._shell.open_window(target)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _fetch_asset(self, path: str) -> tuple[str, httpx.Response]:
        request = self._network.build_request("GET", path)
        try:
            response = await self._network.send(request)
        except httpx.TransportError as exc:
            raise InstallError(f"Failed to fetch {path}: {exc}", path=path) from exc
        if not response.is_success:
            raise InstallError(
                f"Failed to fetch {path}: HTTP {response.status_code}", path=path
            )
        return make_cache_key("GET", request.url), response
