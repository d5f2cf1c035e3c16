"""Disk-backed cache storage using :mod:`diskcache`.

Each generation is a :class:`diskcache.Index` in its own directory::

    <root>/generations/<generation name>/

``Index`` iterates keys in insertion order, which is what capacity
eviction relies on.  Entries are stored as plain dicts
(:meth:`CachedResponse.model_dump`) so the on-disk format does not depend
on pickling model classes.

See Also:
    :func:`~vaultcache.config.get_cache_dir` -- the default *root*.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Optional

import diskcache

from vaultcache.storage.base import CacheGeneration, CacheStorage
from vaultcache.storage.entry import CachedResponse

_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class DiskCacheGeneration(CacheGeneration):
    """A generation persisted in a :class:`diskcache.Index`."""

    def __init__(self, name: str, directory: Path) -> None:
        super().__init__(name)
        self.directory = directory
        self._index = diskcache.Index(str(directory))

    async def get(self, key: str) -> Optional[CachedResponse]:
        data = self._index.get(key)
        if data is None:
            return None
        return CachedResponse.model_validate(data)

    async def put(self, key: str, entry: CachedResponse) -> None:
        # Index keeps the original position on overwrite; pop first so the
        # key moves to the end like a fresh insert.
        self._index.pop(key, None)
        self._index[key] = entry.model_dump()

    async def delete(self, key: str) -> bool:
        return self._index.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return list(self._index.keys())

    async def count(self) -> int:
        return len(self._index)

    async def clear(self) -> None:
        self._index.clear()

    def close(self) -> None:
        self._index.cache.close()


class DiskCacheStorage(CacheStorage):
    """Cache storage rooted at a directory on disk.

    Args:
        root: Base directory; generations are created below
            ``root / "generations"``.

    Example::

        from vaultcache.config import get_cache_dir

        storage = DiskCacheStorage(get_cache_dir())
        static = await storage.open_generation("unityvault-v2")
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root) / "generations"
        self._root.mkdir(parents=True, exist_ok=True)
        self._open: dict[str, DiskCacheGeneration] = {}

    @property
    def directory(self) -> Path:
        return self._root

    async def open_generation(self, name: str) -> DiskCacheGeneration:
        generation = self._open.get(name)
        if generation is None:
            generation = DiskCacheGeneration(name, self._generation_dir(name))
            self._open[name] = generation
        return generation

    async def delete_generation(self, name: str) -> bool:
        directory = self._generation_dir(name)
        generation = self._open.pop(name, None)
        if generation is not None:
            generation.close()
        if not directory.is_dir():
            return generation is not None
        shutil.rmtree(directory)
        return True

    async def generation_names(self) -> list[str]:
        return sorted(p.name for p in self._root.iterdir() if p.is_dir())

    def close(self) -> None:
        for generation in self._open.values():
            generation.close()
        self._open.clear()

    def _generation_dir(self, name: str) -> Path:
        if not _SAFE_NAME.match(name):
            raise ValueError(f"Invalid cache generation name: {name!r}")
        return self._root / name
