"""Built-in CLI sub-commands for ctcli.

* :mod:`~ctcli.commands.api` -- ``login``, ``list``, ``get``, ``create``,
  ``update``, ``put`` and ``delete`` against the authenticated client.
* :mod:`~ctcli.commands.bootstrap` -- unauthenticated bootstrap calls.
* :mod:`~ctcli.commands.config` -- show the effective settings.

Each module either exports a :class:`typer.Typer` sub-application (for
groups like ``bootstrap`` and ``config``) or plain callback functions
registered directly on the root app.
"""
