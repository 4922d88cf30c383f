"""Bootstrap commands -- unauthenticated calls to a freshly installed appliance.

Provides the ``ctcli bootstrap`` sub-command group. These commands always
use a :class:`~ctcli.client.BootstrapClient`, so they need only an
address and never send an ``Authorization`` header.
"""

from __future__ import annotations

from typing import Optional

import typer

from ctcli.commands.common import load_payload, open_client, reported_errors
from ctcli.output import format_response

bootstrap_app = typer.Typer(no_args_is_help=True)


@bootstrap_app.command("post")
def bootstrap_post(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Bootstrap endpoint path."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON body, or @file.json."),
    field: str = typer.Option("id", "--field", "-f", help="Field path to print from the response."),
) -> None:
    """POST to a bootstrap endpoint and print one field of the answer.

    Example::

        ctcli --address https://10.0.0.5 bootstrap post api/v1/cluster/new -d @node.json
    """
    with reported_errors():
        payload = load_payload(data)
        with open_client(ctx, bootstrap=True) as client:
            format_response(client.post_data(endpoint, payload, field))


@bootstrap_app.command("patch")
def bootstrap_patch(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Bootstrap endpoint path."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON body, or @file.json."),
) -> None:
    """PATCH a bootstrap endpoint and print the response body.

    Example::

        ctcli --address https://10.0.0.5 bootstrap patch api/v1/auth/changepw -d @pw.json
    """
    with reported_errors():
        payload = load_payload(data)
        with open_client(ctx, bootstrap=True) as client:
            format_response(client.patch_data(endpoint, payload))
