"""Init command -- create a profile for a portal deployment."""

from __future__ import annotations

import re
from typing import Optional

import httpx
import typer

from vaultcache.output import error, info, success, suggest


def init_command(
    base_url: str = typer.Option(
        ..., "--base-url", "-u", help="Portal origin, e.g. https://portal.example.org."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Profile name (derived from the host if omitted)."
    ),
    timeout: float = typer.Option(30, "--timeout", help="Request timeout in seconds."),
) -> None:
    """Create a profile and pin it as the default for this directory.

    Example::

        vaultcache init --base-url https://portal.example.org
        vaultcache init -u http://localhost:5173 --name dev
    """
    from vaultcache.config import profile_exists, save_profile, write_project_config
    from vaultcache.models import Profile, RequestConfig

    url = httpx.URL(base_url)
    if url.scheme not in ("http", "https") or not url.host:
        error(f"Base URL must be an absolute http(s) URL, got: {base_url}")
        raise typer.Exit(code=2)
    if url.path not in ("", "/"):
        error(f"Base URL must be the portal origin without a path, got: {base_url}")
        raise typer.Exit(code=2)

    profile_name = name or _slugify(url.host)
    if profile_exists(profile_name):
        info(f'Profile "{profile_name}" already exists and will be overwritten.')

    profile = Profile(
        name=profile_name,
        base_url=base_url.rstrip("/"),
        request=RequestConfig(timeout=timeout),
    )
    save_profile(profile)
    write_project_config(profile_name)

    success(f'Profile "{profile_name}" created.')
    suggest("Populate the offline shell: vaultcache cache install")


def _slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower().strip()).strip("-")
    return slug or "default"
