"""Settings resolution with a config file, environment variables, and overrides.

This module turns the scattered places an operator can put connection
settings into one :class:`~ctcli.models.ClientSettings`:

* **Config file** -- ``~/.ciphertrust/config`` (or the path in
  ``$CTCLI_CONFIG``), one ``key = value`` per line. See
  :func:`load_config_file`.
* **Environment** -- ``CIPHERTRUST_ADDRESS``, ``CIPHERTRUST_USERNAME``,
  ``CIPHERTRUST_PASSWORD``, ``CIPHERTRUST_DOMAIN``,
  ``CIPHERTRUST_AUTH_DOMAIN``, ``BOOTSTRAP``, ``NO_SSL_VERIFY`` and
  ``REST_API_TIMEOUT``. See :func:`load_env`.
* **Overrides** -- values given explicitly, typically CLI flags.
* **Precedence resolution** -- :func:`resolve_settings` layers the three
  sources over the defaults.
* **Data directory** -- XDG compliant on Linux/BSD, ``~/.ctcli/`` elsewhere;
  holds crash logs. See :func:`get_data_dir`.
"""

from __future__ import annotations

import os
import platform
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from ctcli.exceptions import ConfigurationError
from ctcli.models import ClientSettings

_APP_NAME = "ctcli"
_CONFIG_ENV_VAR = "CTCLI_CONFIG"

# Config-file keys and the settings field each one feeds.
_FILE_KEYS = {
    "address": "address",
    "username": "username",
    "password": "password",
    "domain": "domain",
    "auth_domain": "auth_domain",
    "bootstrap": "bootstrap",
    "no_ssl_verify": "no_ssl_verify",
    "rest_api_timeout": "timeout",
    "sign_in_endpoint": "sign_in_endpoint",
}

_ENV_KEYS = {
    "CIPHERTRUST_ADDRESS": "address",
    "CIPHERTRUST_USERNAME": "username",
    "CIPHERTRUST_PASSWORD": "password",
    "CIPHERTRUST_DOMAIN": "domain",
    "CIPHERTRUST_AUTH_DOMAIN": "auth_domain",
    "BOOTSTRAP": "bootstrap",
    "NO_SSL_VERIFY": "no_ssl_verify",
    "REST_API_TIMEOUT": "timeout",
}

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off", ""}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory, creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ctcli/`` (default ``~/.local/share/ctcli/``).
    On macOS/Windows: ``~/.ctcli/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    """Return the config file location (it need not exist)."""
    override = os.environ.get(_CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ciphertrust" / "config"


# --- Value parsing ---


def parse_bool(value: Any, name: str) -> bool:
    """Parse a boolean written as ``yes``/``no``, ``true``/``false`` or ``1``/``0``.

    Raises:
        ConfigurationError: If *value* is not one of the accepted spellings.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for '{name}': {value!r}")


def parse_timeout(value: Any, name: str = "rest_api_timeout") -> float:
    """Parse a positive timeout in seconds.

    Raises:
        ConfigurationError: If *value* is not a positive number.
    """
    try:
        timeout = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout for '{name}': {value!r}") from exc
    if timeout <= 0:
        raise ConfigurationError(f"Timeout for '{name}' must be positive, got {value!r}")
    return timeout


# --- Sources ---


def load_config_file(path: Optional[Path] = None) -> dict[str, str]:
    """Read ``key = value`` lines from the config file.

    Blank lines, ``#`` comments, lines without ``=`` and unknown keys are
    skipped. A missing file yields an empty dict.

    Args:
        path: File to read. Defaults to :func:`get_config_path`.

    Returns:
        Raw string values keyed by settings field name.

    Raises:
        ConfigurationError: If the file exists but cannot be read.
    """
    path = path or get_config_path()
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        field = _FILE_KEYS.get(key)
        if field is not None:
            values[field] = value
    return values


def load_env(environ: Optional[Mapping[str, str]] = None) -> dict[str, str]:
    """Collect the settings present in the environment, keyed by field name."""
    environ = os.environ if environ is None else environ
    return {field: environ[var] for var, field in _ENV_KEYS.items() if var in environ}


# --- Precedence resolution ---


def resolve_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientSettings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. *overrides* (CLI flags); ``None`` values are ignored
        2. Environment variables
        3. Config file
        4. Defaults from :class:`~ctcli.models.ClientSettings`

    ``no_ssl_verify`` from the file or environment is inverted into
    ``verify_ssl``; overrides use ``verify_ssl`` directly.

    Returns:
        The frozen :class:`~ctcli.models.ClientSettings`.

    Raises:
        ConfigurationError: If a boolean or timeout value cannot be parsed.
    """
    merged: dict[str, Any] = {}
    merged.update(load_config_file(config_path))
    merged.update(load_env(environ))
    merged.update({k: v for k, v in (overrides or {}).items() if v is not None})

    if "no_ssl_verify" in merged:
        no_verify = parse_bool(merged.pop("no_ssl_verify"), "no_ssl_verify")
        merged.setdefault("verify_ssl", not no_verify)
    if "verify_ssl" in merged:
        merged["verify_ssl"] = parse_bool(merged["verify_ssl"], "verify_ssl")
    if "bootstrap" in merged:
        merged["bootstrap"] = parse_bool(merged["bootstrap"], "bootstrap")
    if "timeout" in merged:
        merged["timeout"] = parse_timeout(merged["timeout"])

    try:
        return ClientSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


def validate_settings(settings: ClientSettings) -> list[str]:
    """Check that the settings are complete enough to connect.

    An address is always required. Outside bootstrap mode a username and
    password are required too.

    Returns:
        Human-readable problems. An empty list means the settings are usable.
    """
    errors: list[str] = []
    if not settings.address:
        errors.append(
            "Missing address. Set it in the config file, with --address, "
            "or in the CIPHERTRUST_ADDRESS environment variable."
        )
    if not settings.bootstrap:
        if not settings.username:
            errors.append(
                "Missing username. Set it in the config file, with --username, "
                "or in the CIPHERTRUST_USERNAME environment variable."
            )
        if not settings.password:
            errors.append(
                "Missing password. Set it in the config file, with --password, "
                "or in the CIPHERTRUST_PASSWORD environment variable."
            )
    return errors
