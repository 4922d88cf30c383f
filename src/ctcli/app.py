"""Typer application and CLI entry point for ctcli.

This module wires together the top-level Typer application and registers
the sub-commands: the API commands (``login``, ``list``, ``get``,
``create``, ``update``, ``put``, ``delete``) plus the ``bootstrap`` and
``config`` groups.

The root callback turns the global connection flags into overrides that
:func:`~ctcli.config.resolve_settings` layers over the config file and the
environment. The :func:`main` function is the console-script entry point
declared in ``pyproject.toml``; unhandled exceptions are written to a crash
log under the data directory.

See Also:
    :mod:`ctcli.config`: Settings resolution.
    :mod:`ctcli.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from ctcli import __version__
from ctcli.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="ctcli",
    help="Command-line client for the CipherTrust Manager REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from ctcli.commands.api import (  # noqa: E402
    create_command,
    delete_command,
    get_command,
    list_command,
    login_command,
    put_command,
    update_command,
)
from ctcli.commands.bootstrap import bootstrap_app  # noqa: E402
from ctcli.commands.config import config_app  # noqa: E402

app.command("login")(login_command)
app.command("list")(list_command)
app.command("get")(get_command)
app.command("create")(create_command)
app.command("update")(update_command)
app.command("put")(put_command)
app.command("delete")(delete_command)
app.add_typer(bootstrap_app, name="bootstrap", help="Unauthenticated bootstrap calls.")
app.add_typer(config_app, name="config", help="Inspect the effective settings.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ctcli {__version__}")
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
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help="Base URL, e.g. https://cm.example.com."
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", help="Sign-in user name."
    ),
    password: Optional[str] = typer.Option(
        None, "--password", help="Sign-in password (prefer CIPHERTRUST_PASSWORD)."
    ),
    domain: Optional[str] = typer.Option(
        None, "--domain", help="Domain to operate in."
    ),
    auth_domain: Optional[str] = typer.Option(
        None, "--auth-domain", help="Domain the user authenticates against."
    ),
    bootstrap: Optional[bool] = typer.Option(
        None, "--bootstrap", help="Unauthenticated bootstrap mode.", show_default=False
    ),
    verify_ssl: Optional[bool] = typer.Option(
        None, "--verify-ssl/--no-verify-ssl", help="Verify the server certificate.", show_default=False
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~ctcli.output.OutputManager` from CLI
    flags and stores the connection flags in ``ctx.obj["overrides"]``.
    Flags left unset are ``None`` and do not override the config file or
    the environment.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        address: Base URL override.
        username: User name override.
        password: Password override.
        domain: Domain override.
        auth_domain: Authentication domain override.
        bootstrap: Bootstrap mode override.
        verify_ssl: Certificate verification override.
        timeout: Request timeout override, in seconds.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from ctcli.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "address": address,
        "username": username,
        "password": password,
        "domain": domain,
        "auth_domain": auth_domain,
        "bootstrap": bootstrap,
        "verify_ssl": verify_ssl,
        "timeout": timeout,
    }


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from ctcli.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ctcli`` console script.

    Unhandled :class:`~ctcli.exceptions.CtcliError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
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
        from ctcli.exceptions import CtcliError
        from ctcli.output import error

        if isinstance(exc, CtcliError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
