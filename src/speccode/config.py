"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent user configuration for speccode:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.speccode/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~speccode.models.GlobalConfig`
  JSON file storing defaults (output format, default profile).
* **Profiles** -- One JSON file per remote service connection, each
  deserialised into a :class:`~speccode.models.Profile`.
* **Precedence resolution** -- :func:`resolve_profile` merges CLI flags,
  environment variables and the global config into the effective profile.
* **Credential resolution** -- :func:`resolve_credential` reads the API
  token from env vars, files, or an interactive prompt.

All file writes go through :func:`atomic_write`, which is also what the
``update`` command uses to write generated code.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from speccode.exceptions import ConfigError
from speccode.models import GlobalConfig, Profile

_APP_NAME = "speccode"
_CONFIG_FILENAME = "config.json"

DEFAULT_API_URI = "https://api.apibuilder.io"
DEFAULT_PROFILE_NAME = "default"
TOKEN_ENV_VAR = "SPECCODE_TOKEN"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/speccode/`` (default ``~/.config/speccode/``).
    On macOS/Windows: ``~/.speccode/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/speccode/`` (default ``~/.local/share/speccode/``).
    On macOS/Windows: ``~/.speccode/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* atomically using a temp file + rename.

    Parent directories are created as needed. The temporary file lives in
    the same directory as *path* so that ``os.replace`` is an atomic rename
    on POSIX systems. On any failure the temp file is removed and the
    original exception is re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~speccode.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Profiles ---


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Profile.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically to the profiles directory."""
    data = profile.model_dump(mode="json")
    atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


def default_profile() -> Profile:
    """The built-in profile used when nothing is configured.

    Points at :data:`DEFAULT_API_URI` and reads the token from
    ``$SPECCODE_TOKEN`` when that variable is set.
    """
    token_source = f"env:{TOKEN_ENV_VAR}" if os.environ.get(TOKEN_ENV_VAR) else None
    return Profile(
        name=DEFAULT_PROFILE_NAME,
        api_uri=DEFAULT_API_URI,
        token_source=token_source,
    )


# --- Precedence resolution ---


def resolve_profile(
    cli_profile: Optional[str] = None,
    cli_api_uri: Optional[str] = None,
) -> Profile:
    """Resolve the effective connection profile.

    Precedence (high to low):
        1. CLI flags (``cli_profile``, ``cli_api_uri``)
        2. Environment variables (``SPECCODE_PROFILE``, ``SPECCODE_API_URI``,
           ``SPECCODE_TOKEN``)
        3. User config ``default_profile``
        4. The only saved profile, if exactly one exists and
           ``auto_select_single_profile`` is on
        5. :func:`default_profile`

    Raises:
        ConfigError: If a named profile does not exist or is invalid.
    """
    global_cfg = load_global_config()

    name: Optional[str] = global_cfg.default_profile
    env_profile = os.environ.get("SPECCODE_PROFILE")
    if env_profile:
        name = env_profile
    if cli_profile is not None:
        name = cli_profile

    if name is None and global_cfg.auto_select_single_profile:
        profiles = list_profiles()
        if len(profiles) == 1:
            name = profiles[0]

    profile = load_profile(name) if name is not None else default_profile()

    env_api_uri = os.environ.get("SPECCODE_API_URI")
    if cli_api_uri is not None:
        profile.api_uri = cli_api_uri
    elif env_api_uri:
        profile.api_uri = env_api_uri

    # An exported token wins over whatever source the profile names.
    if os.environ.get(TOKEN_ENV_VAR):
        profile.token_source = f"env:{TOKEN_ENV_VAR}"

    return profile


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("API token: ")

    raise ConfigError(f"Unknown credential source format: {source}")
