"""Built-in CLI sub-commands for vaultcache.

* :mod:`~vaultcache.commands.init` -- create a portal profile.
* :mod:`~vaultcache.commands.config` -- view and modify global settings.
* :mod:`~vaultcache.commands.cache` -- install, inspect and clear cache
  generations.
* :mod:`~vaultcache.commands.fetch` -- send one request through the cache
  manager.
"""
