"""Cache storage substrate for vaultcache.

The cache manager never touches a concrete store directly; it talks to a
:class:`CacheStorage`, which hands out named :class:`CacheGeneration`
partitions of request/response entries.  Two backends ship with the
package:

* :class:`MemoryCacheStorage` -- ordered in-process mapping, used by the
  test-suite and by short-lived embeddings.
* :class:`DiskCacheStorage` -- one :class:`diskcache.Index` per generation,
  persisted under the user's cache directory and used by the CLI.

Both preserve insertion order, which is the order capacity eviction
removes entries in.
"""

from vaultcache.storage.base import CacheGeneration, CacheStorage
from vaultcache.storage.disk import DiskCacheStorage
from vaultcache.storage.entry import CachedResponse, make_cache_key
from vaultcache.storage.memory import MemoryCacheStorage

__all__ = [
    "CacheGeneration",
    "CacheStorage",
    "CachedResponse",
    "DiskCacheStorage",
    "MemoryCacheStorage",
    "make_cache_key",
]
