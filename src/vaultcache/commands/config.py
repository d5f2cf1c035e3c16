"""Config commands -- view and modify global configuration.

Settings control the cache generation names, TTL, capacity, static
manifest, notification defaults and output format.
"""

from __future__ import annotations

import json

import typer

from vaultcache.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Example::

        vaultcache config show --json
    """
    from vaultcache.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'cache.ttl_ms')."),
    value: str = typer.Argument(help="Value to set; lists are given as JSON."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type (bool, int, list or
    str) and the result is validated before saving.

    Example::

        vaultcache config set cache.api_cache_name unityvault-api-v3
        vaultcache config set cache.max_api_entries 100
        vaultcache config set cache.static_assets '["/", "/offline.html"]'
    """
    from vaultcache.config import load_global_config, save_global_config
    from vaultcache.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    elif isinstance(current, list):
        try:
            coerced = json.loads(value)
        except json.JSONDecodeError:
            error(f"Expected a JSON list for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset configuration to defaults; asks for confirmation unless ``--force``."""
    from vaultcache.config import save_global_config
    from vaultcache.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        if not typer.confirm("Reset all config to defaults?"):
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
