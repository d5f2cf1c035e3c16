"""Abstract cache storage interfaces.

Mirrors the browser's ``CacheStorage`` / ``Cache`` pair closely enough that
the worker logic reads the same against any backend, while staying small
enough to fake in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from vaultcache.storage.entry import CachedResponse


class CacheGeneration(ABC):
    """A named partition of cached request/response entries.

    Implementations must iterate :meth:`keys` in insertion order, and
    :meth:`put` on an existing key must move that key to the end.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def get(self, key: str) -> Optional[CachedResponse]:
        """Return the entry stored under *key*, or ``None``."""

    @abstractmethod
    async def put(self, key: str, entry: CachedResponse) -> None:
        """Store *entry* under *key*, replacing any previous entry."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove *key*; return ``True`` when something was removed."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """Return every key, oldest first."""

    async def count(self) -> int:
        return len(await self.keys())

    async def clear(self) -> None:
        for key in await self.keys():
            await self.delete(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CacheStorage(ABC):
    """Registry of cache generations."""

    @abstractmethod
    async def open_generation(self, name: str) -> CacheGeneration:
        """Return generation *name*, creating it when absent."""

    @abstractmethod
    async def delete_generation(self, name: str) -> bool:
        """Drop generation *name* with all its entries.

        Returns:
            ``True`` if the generation existed.
        """

    @abstractmethod
    async def generation_names(self) -> list[str]:
        """Return the names of all existing generations."""

    async def has_generation(self, name: str) -> bool:
        return name in await self.generation_names()

    def close(self) -> None:
        """Release backend resources.  The default implementation holds none."""
