"""Fetch command -- send one request through the offline cache manager."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer

from vaultcache.output import debug, warning


def fetch_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Path on the portal, e.g. /api/members."),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method."),
    body: Optional[str] = typer.Option(
        None, "--body", "-d", help="Request body (JSON is sent as JSON)."
    ),
) -> None:
    """Request PATH the way the portal pages do.

    API reads fall back to the cache when the backend is unreachable;
    static paths are served from the installed shell.  Error statuses exit
    non-zero (503 from the offline fallback exits with 5).

    Example::

        vaultcache fetch /api/members
        vaultcache fetch /api/auth/login -X POST -d '{"email": "a@b.org"}'
    """
    from vaultcache.client import format_api_response
    from vaultcache.config import require_profile
    from vaultcache.exceptions import InstallError
    from vaultcache.session import OfflineSession

    cli_profile = ctx.obj.get("profile") if ctx.obj else None
    config, profile = require_profile(cli_profile)
    json_body, raw_body = _split_body(body)

    async def _run() -> None:
        async with OfflineSession(profile, config) as session:
            try:
                state = await session.start()
                debug(f"Cache manager {state.value}")
            except InstallError as exc:
                # Without an active worker requests go straight to the network.
                warning(f"Cache manager not installed: {exc}")
            async with session.portal(raise_for_status=False) as client:
                response = await client.request(
                    method, path, json_body=json_body, body=raw_body
                )
                format_api_response(response, cache_header=config.cache.cached_at_header)
                client.raise_for_error(response)

    asyncio.run(_run())


def _split_body(body: Optional[str]) -> tuple[Any, Optional[str]]:
    """Return ``(json_body, raw_body)``; exactly one is set when *body* is given."""
    if body is None:
        return None, None
    try:
        return json.loads(body), None
    except json.JSONDecodeError:
        return None, body
