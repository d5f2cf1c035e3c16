"""vaultcache -- Offline API response cache manager for the UnityVault portal.

The portal's pages call a REST backend under ``/api/``.  This package sits
between those pages and the network: static assets are served cache-first,
API reads are served network-first with a time-bounded cached fallback, and
writes, auth and payment calls always go straight to the network.

Typical workflow::

    vaultcache init --base-url https://portal.example.org
    vaultcache cache install          # populate the static generation
    vaultcache fetch /api/members     # served from cache when offline

Modules:
    app: Typer application and CLI entry point.
    worker: The cache manager and its lifecycle handlers.
    host: Lifecycle state machine and the httpx transport adapter.
    storage: Cache storage substrate (memory and diskcache backends).
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
