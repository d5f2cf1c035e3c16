"""Fetch strategies: network-only, network-first and cache-first.

Each strategy answers one intercepted :class:`httpx.Request` and owns the
failure semantics of its route:

* :class:`NetworkOnly` never touches a cache; transport errors propagate
  unchanged.
* :class:`NetworkFirst` stores successful reads with a timestamp header,
  bounds the generation to ``max_api_entries`` and, when the network is
  down, serves a copy younger than ``ttl_ms`` or a synthesized 503.  It
  never raises a transport error.
* :class:`CacheFirst` serves the static generation, then the network, then
  the offline page.

Cache writes are best-effort: a failing write is reported through
:func:`~vaultcache.output.debug` and the network response is returned as if
nothing happened.
"""

from __future__ import annotations

import json
import time
from typing import Callable, Optional

import httpx

from vaultcache.models import OfflineCacheConfig
from vaultcache.output import debug
from vaultcache.storage import CacheStorage, CachedResponse, make_cache_key

Clock = Callable[[], int]

OFFLINE_API_ERROR = "Network error. No cached data available."


def now_ms() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def offline_api_response(request: httpx.Request) -> httpx.Response:
    """The 503 returned for an API read with neither network nor fresh cache."""
    body = json.dumps({"error": OFFLINE_API_ERROR})
    return httpx.Response(
        status_code=503,
        headers={"Content-Type": "application/json"},
        content=body.encode("utf-8"),
        request=request,
    )


class NetworkOnly:
    """Forward to the network unmodified."""

    def __init__(self, network: httpx.AsyncClient) -> None:
        self._network = network

    async def handle(self, request: httpx.Request) -> httpx.Response:
        return await self._network.send(request)


class NetworkFirst:
    """Network, falling back to a time-bounded copy in the API generation.

    Args:
        network: Client used for the upstream call.
        storage: Substrate holding the API generation.
        config: Generation name, TTL, capacity and timestamp header.
        clock: Returns the current time in ms; injectable for tests.
    """

    def __init__(
        self,
        network: httpx.AsyncClient,
        storage: CacheStorage,
        config: OfflineCacheConfig,
        clock: Clock = now_ms,
    ) -> None:
        self._network = network
        self._storage = storage
        self._config = config
        self._clock = clock

    async def handle(self, request: httpx.Request) -> httpx.Response:
        key = make_cache_key(request.method, request.url)
        try:
            response = await self._network.send(request)
        except httpx.TransportError as exc:
            debug(f"Network failed for {key} ({type(exc).__name__}), trying cache")
            return await self._from_cache(key, request)

        if response.is_success:
            await self._store(key, response)
        return response

    async def _store(self, key: str, response: httpx.Response) -> None:
        config = self._config
        try:
            entry = CachedResponse.from_response(
                response, extra_headers={config.cached_at_header: str(self._clock())}
            )
            generation = await self._storage.open_generation(config.api_cache_name)
            await generation.put(key, entry)
            keys = await generation.keys()
            # One eviction per write; concurrent writers may briefly overshoot.
            if len(keys) > config.max_api_entries:
                await generation.delete(keys[0])
                debug(f"Evicted {keys[0]} (capacity {config.max_api_entries})")
        except Exception as exc:
            debug(f"Cache write failed for {key}: {exc}")

    async def _from_cache(self, key: str, request: httpx.Request) -> httpx.Response:
        config = self._config
        try:
            generation = await self._storage.open_generation(config.api_cache_name)
            entry = await generation.get(key)
            if entry is None:
                debug(f"No cached copy of {key}")
                return offline_api_response(request)

            age = entry.age_ms(self._clock(), config.cached_at_header)
            if age is not None and age < config.ttl_ms:
                debug(f"Serving cached copy of {key}")
                return entry.to_response(request)

            await generation.delete(key)
            debug(f"Evicted stale copy of {key}")
        except Exception as exc:
            debug(f"Cache read failed for {key}: {exc}")
        return offline_api_response(request)


class CacheFirst:
    """Static generation first, then the network, then the offline page."""

    def __init__(
        self,
        network: httpx.AsyncClient,
        storage: CacheStorage,
        config: OfflineCacheConfig,
    ) -> None:
        self._network = network
        self._storage = storage
        self._config = config

    async def handle(self, request: httpx.Request) -> httpx.Response:
        key = make_cache_key(request.method, request.url)
        cached = await self._lookup(key)
        if cached is not None:
            return cached.to_response(request)

        try:
            return await self._network.send(request)
        except httpx.TransportError:
            # Resolved the same way install resolves manifest paths.
            offline = self._network.build_request("GET", self._config.offline_page)
            fallback = await self._lookup(make_cache_key("GET", offline.url))
            if fallback is None:
                raise
            debug(f"Serving offline page for {key}")
            return fallback.to_response(request)

    async def _lookup(self, key: str) -> Optional[CachedResponse]:
        name = self._config.static_cache_name
        try:
            if not await self._storage.has_generation(name):
                return None
            generation = await self._storage.open_generation(name)
            return await generation.get(key)
        except Exception as exc:
            debug(f"Static cache lookup failed for {key}: {exc}")
            return None
