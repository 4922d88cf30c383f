"""Config commands -- inspect the effective connection settings.

Provides the ``ctcli config`` sub-command group. Settings themselves live
in ``~/.ciphertrust/config`` and the environment (see
:mod:`ctcli.config`); these commands only show what the precedence chain
resolves to.
"""

from __future__ import annotations

import typer

from ctcli.commands.common import reported_errors, resolve_from_context
from ctcli.output import info, print_data, print_table, suggest, warning

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective settings, password masked, and any problems with them.

    Example::

        ctcli config show
        ctcli --json config show
    """
    from ctcli.config import get_config_path, validate_settings

    with reported_errors():
        settings = resolve_from_context(ctx)
    info(f"Config file: {get_config_path()}")
    rows = [[key, "" if value is None else str(value)] for key, value in settings.masked().items()]
    print_table(["setting", "value"], rows, title="Effective settings")
    problems = validate_settings(settings)
    for problem in problems:
        warning(problem)
    if problems:
        suggest(f"Add the missing keys to {get_config_path()} or export them.")


@config_app.command("path")
def config_path() -> None:
    """Print the config file location."""
    from ctcli.config import get_config_path

    print_data(str(get_config_path()))
