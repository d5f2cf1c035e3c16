"""Typer application and CLI entry point for vaultcache.

Registers the built-in sub-commands (``init``, ``config``, ``cache``,
``fetch``) on the root application.  :func:`main` is the console-script
entry point declared in ``pyproject.toml``: it installs a SIGINT handler,
runs the Typer app and maps :class:`~vaultcache.exceptions.VaultCacheError`
to its exit code.  Any other exception is written to a crash log under the
data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from vaultcache import __version__
from vaultcache.commands.cache import cache_app
from vaultcache.commands.config import config_app
from vaultcache.commands.fetch import fetch_command
from vaultcache.commands.init import init_command
from vaultcache.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="vaultcache",
    help="Offline response cache manager for the UnityVault portal.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("init")(init_command)
app.command("fetch")(fetch_command)
app.add_typer(config_app, name="config", help="Configuration management.")
app.add_typer(cache_app, name="cache", help="Cache generation management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"vaultcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show cache hits, misses and evictions."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~vaultcache.output.OutputManager` and stores
    the shared options in ``ctx.obj``.
    """
    from vaultcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from vaultcache.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``vaultcache`` console script.

    :class:`~vaultcache.exceptions.VaultCacheError` exits with the error's
    ``exit_code``; anything else produces a crash log and exit code 1.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from vaultcache.exceptions import VaultCacheError
        from vaultcache.output import error

        if isinstance(exc, VaultCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
