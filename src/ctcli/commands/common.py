"""Helpers shared by the command modules.

* :func:`open_client` resolves settings from the Typer context and builds
  the right client.
* :func:`load_payload` turns a ``--data`` value into request body bytes.
* :func:`reported_errors` converts :class:`~ctcli.exceptions.CtcliError`
  into an error message and the matching exit code.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import typer

from ctcli.exceptions import ConfigurationError, CtcliError, InvalidUsageError
from ctcli.models import ClientSettings
from ctcli.output import error


def _obj(ctx: typer.Context) -> dict[str, Any]:
    ctx.ensure_object(dict)
    return ctx.obj


def resolve_from_context(ctx: typer.Context, **extra: Any) -> ClientSettings:
    """Resolve settings, layering the global CLI flags (and *extra*) over file and env."""
    from ctcli.config import resolve_settings

    overrides = dict(_obj(ctx).get("overrides") or {})
    overrides.update(extra)
    return resolve_settings(overrides)


def open_client(ctx: typer.Context, bootstrap: bool = False) -> Any:
    """Build the client for this invocation.

    Args:
        ctx: Typer context; ``ctx.obj["overrides"]`` holds the global flags
            and ``ctx.obj["transport"]`` an optional httpx transport.
        bootstrap: Force a :class:`~ctcli.client.BootstrapClient`.

    Returns:
        A :class:`~ctcli.client.Client`, or a
        :class:`~ctcli.client.BootstrapClient` when *bootstrap* is set.

    Raises:
        ConfigurationError: If required settings are missing, or if bootstrap
            mode is configured for a command that needs an authenticated
            client.
    """
    from ctcli.client import connect
    from ctcli.config import validate_settings

    settings = resolve_from_context(ctx, bootstrap=True) if bootstrap else resolve_from_context(ctx)
    if settings.bootstrap and not bootstrap:
        raise ConfigurationError(
            "Bootstrap mode is enabled; only 'ctcli bootstrap' commands are available"
        )
    problems = validate_settings(settings)
    if problems:
        raise ConfigurationError(" ".join(problems))
    return connect(settings, transport=_obj(ctx).get("transport"))


def load_payload(data: Optional[str]) -> Optional[bytes]:
    """Read a ``--data`` value: inline JSON, or ``@path`` to read it from a file.

    Raises:
        InvalidUsageError: If the file cannot be read or the text is not JSON.
    """
    if data is None:
        return None
    if data.startswith("@"):
        path = Path(data[1:]).expanduser()
        try:
            data = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read payload file {path}: {exc}") from exc
    try:
        json.loads(data)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--data is not valid JSON: {exc}") from exc
    return data.encode("utf-8")


@contextmanager
def reported_errors() -> Iterator[None]:
    """Report a :class:`CtcliError` on stderr and exit with its code."""
    try:
        yield
    except CtcliError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
