"""Cache commands -- install, inspect and clear cache generations.

Generations live under the user cache directory (see
:func:`~vaultcache.config.get_cache_dir`) and persist between runs, so an
``install`` done while online keeps the app shell available offline.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from vaultcache.output import info, print_table, success


cache_app = typer.Typer(no_args_is_help=True)


def _cli_profile(ctx: typer.Context) -> Optional[str]:
    return ctx.obj.get("profile") if ctx.obj else None


@cache_app.command("install")
def cache_install(ctx: typer.Context) -> None:
    """Fetch the static manifest and activate the cache manager.

    Fails with exit code 7 when any manifest asset cannot be fetched; the
    previously installed generation is then left untouched.

    Example::

        vaultcache cache install
    """
    from vaultcache.config import require_profile
    from vaultcache.session import OfflineSession

    config, profile = require_profile(_cli_profile(ctx))
    info(f"Installing {config.cache.static_cache_name} from {profile.base_url}")

    async def _run() -> str:
        async with OfflineSession(profile, config) as session:
            state = await session.start(reinstall=True)
            return state.value

    state = asyncio.run(_run())
    success(f"Cache manager {state}: {len(config.cache.static_assets)} assets stored.")


@cache_app.command("stats")
def cache_stats() -> None:
    """List cache generations with their entry counts.

    Example::

        vaultcache cache stats --json
    """
    from vaultcache.config import get_cache_dir, load_global_config
    from vaultcache.storage import DiskCacheStorage

    cache_config = load_global_config().cache
    roles = {
        cache_config.static_cache_name: "static",
        cache_config.api_cache_name: "api",
    }

    async def _collect(storage: DiskCacheStorage) -> list[list[str]]:
        rows = []
        for name in await storage.generation_names():
            generation = await storage.open_generation(name)
            rows.append([name, roles.get(name, "stale"), str(await generation.count())])
        return rows

    storage = DiskCacheStorage(get_cache_dir())
    try:
        rows = asyncio.run(_collect(storage))
    finally:
        storage.close()

    info(f"Cache directory: {storage.directory}")
    print_table(["generation", "role", "entries"], rows, title="Cache generations")


@cache_app.command("clear")
def cache_clear(
    ctx: typer.Context,
    generation: Optional[str] = typer.Option(
        None, "--generation", "-g", help="Delete only this generation."
    ),
) -> None:
    """Delete one cache generation, or all of them.

    Example::

        vaultcache cache clear --generation unityvault-api-v2
        vaultcache cache clear --force
    """
    from vaultcache.config import get_cache_dir
    from vaultcache.storage import DiskCacheStorage

    force = ctx.obj.get("force", False) if ctx.obj else False
    if generation is None and not force:
        if not typer.confirm("Delete every cache generation?"):
            info("Cancelled.")
            raise typer.Exit()

    async def _clear(storage: DiskCacheStorage) -> list[str]:
        names = [generation] if generation else await storage.generation_names()
        return [name for name in names if await storage.delete_generation(name)]

    storage = DiskCacheStorage(get_cache_dir())
    try:
        removed = asyncio.run(_clear(storage))
    finally:
        storage.close()

    if not removed:
        info("Nothing to delete.")
        return
    success(f"Deleted {len(removed)} generation(s): {', '.join(removed)}")
