"""In-process cache storage backed by ordered dictionaries."""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional

from vaultcache.storage.base import CacheGeneration, CacheStorage
from vaultcache.storage.entry import CachedResponse


class MemoryCacheGeneration(CacheGeneration):
    """A generation held in an :class:`~collections.OrderedDict`."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()

    async def get(self, key: str) -> Optional[CachedResponse]:
        return self._entries.get(key)

    async def put(self, key: str, entry: CachedResponse) -> None:
        self._entries.pop(key, None)
        self._entries[key] = entry

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return list(self._entries)

    async def count(self) -> int:
        return len(self._entries)

    async def clear(self) -> None:
        self._entries.clear()


class MemoryCacheStorage(CacheStorage):
    """Generations live for the lifetime of this object.

    Example::

        storage = MemoryCacheStorage()
        api = await storage.open_generation("unityvault-api-v2")
    """

    def __init__(self) -> None:
        self._generations: dict[str, MemoryCacheGeneration] = {}

    async def open_generation(self, name: str) -> MemoryCacheGeneration:
        generation = self._generations.get(name)
        if generation is None:
            generation = MemoryCacheGeneration(name)
            self._generations[name] = generation
        return generation

    async def delete_generation(self, name: str) -> bool:
        return self._generations.pop(name, None) is not None

    async def generation_names(self) -> list[str]:
        return list(self._generations)
