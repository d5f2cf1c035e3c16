"""Where vaultcache keeps its files, and how settings are resolved.

Three locations are used, each created on first access:

* the config directory holds ``config.json`` (a
  :class:`~vaultcache.models.GlobalConfig`, including the cache generation
  names and notification defaults) and ``profiles/<name>.json``;
* the cache directory holds the persistent cache generations;
* the data directory holds crash logs.

Linux and the BSDs follow the XDG base directory variables; other
platforms use ``~/.vaultcache``.  JSON files are replaced atomically.
A ``vaultcache.json`` in the working directory pins the profile for that
project, see :func:`resolve_config`.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from vaultcache.exceptions import ConfigError
from vaultcache.models import GlobalConfig, Profile

_APP_NAME = "vaultcache"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "vaultcache.json"


# --- Directories ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _app_dir(env_var: str, home_segments: tuple[str, ...], fallback: tuple[str, ...]) -> Path:
    """Resolve and create one vaultcache directory.

    Args:
        env_var: XDG variable consulted on XDG platforms.
        home_segments: Default location under ``$HOME`` when *env_var* is unset.
        fallback: Segments under ``~/.vaultcache`` on other platforms.
    """
    if _is_xdg_platform():
        base = os.environ.get(env_var) or Path.home().joinpath(*home_segments)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/vaultcache`` or ``~/.vaultcache``."""
    return _app_dir("XDG_CONFIG_HOME", (".config",), ())


def get_cache_dir() -> Path:
    """``$XDG_CACHE_HOME/vaultcache`` or ``~/.vaultcache/cache``.

    Safe to delete at any time; the next install repopulates the static
    generation.
    """
    return _app_dir("XDG_CACHE_HOME", (".cache",), ("cache",))


def get_data_dir() -> Path:
    """``$XDG_DATA_HOME/vaultcache`` or ``~/.vaultcache/logs``; crash logs go here."""
    return _app_dir("XDG_DATA_HOME", (".local", "share"), ("logs",))


def get_profiles_dir() -> Path:
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* via a sibling temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~vaultcache.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Profiles ---


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    profiles_dir = get_profiles_dir()
    return sorted(p.stem for p in profiles_dir.glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    data = _read_json(path, f"profile '{name}'")
    try:
        return Profile.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically; the file name is derived from ``profile.name``."""
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./vaultcache.json``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


def write_project_config(profile_name: str) -> Path:
    """Pin *profile_name* as the default for the current directory."""
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    path.write_text(json.dumps({"default_profile": profile_name}, indent=2) + "\n")
    return path


# --- Precedence resolution ---


def resolve_config(
    cli_profile: Optional[str] = None,
    cli_base_url: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_profile``, ``cli_base_url``, ``cli_format``)
        2. Environment variables (``VAULTCACHE_PROFILE``, ``VAULTCACHE_BASE_URL``)
        3. Project config (``./vaultcache.json``)
        4. User config (``~/.config/vaultcache/config.json``)
        5. Defaults

    Returns:
        A tuple of ``(global_config, active_profile_or_None)``.
    """
    global_cfg = load_global_config()

    project = load_project_config()
    project_profile_name: Optional[str] = None
    if project is not None:
        project_profile_name = project.get("default_profile")

    resolved_profile_name: Optional[str] = global_cfg.default_profile
    if project_profile_name is not None:
        resolved_profile_name = project_profile_name
    env_profile = os.environ.get("VAULTCACHE_PROFILE")
    if env_profile:
        resolved_profile_name = env_profile
    if cli_profile is not None:
        resolved_profile_name = cli_profile

    # Auto-select if only one profile and the setting is enabled
    if resolved_profile_name is None and global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            resolved_profile_name = profiles[0]

    profile: Optional[Profile] = None
    if resolved_profile_name is not None:
        profile = load_profile(resolved_profile_name)

    if profile is not None:
        # base_url: CLI > env > profile
        env_base_url = os.environ.get("VAULTCACHE_BASE_URL")
        if cli_base_url is not None:
            profile.base_url = cli_base_url
        elif env_base_url:
            profile.base_url = env_base_url

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg, profile


def require_profile(cli_profile: Optional[str] = None) -> tuple[GlobalConfig, Profile]:
    """Like :func:`resolve_config` but fail when no profile can be resolved.

    Raises:
        ConfigError: If no profile is configured.
    """
    global_cfg, profile = resolve_config(cli_profile=cli_profile)
    if profile is None:
        raise ConfigError(
            "No profile configured. Create one with: vaultcache init --base-url URL"
        )
    return global_cfg, profile
