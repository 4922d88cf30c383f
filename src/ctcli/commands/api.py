"""API commands -- call the appliance through the client primitives.

Each command maps onto one primitive of
:class:`~ctcli.client.sync_client.Client`:

* ``ctcli login`` -- sign in (``--show-token`` prints the token).
* ``ctcli list ENDPOINT`` -- :meth:`~ctcli.client.Client.get_all`.
* ``ctcli get ENDPOINT ID`` -- :meth:`~ctcli.client.Client.read_data_by_param`
  (``ID`` may be ``all``).
* ``ctcli create ENDPOINT --data JSON`` -- ``post_data`` / ``post_data_raw``.
* ``ctcli update ENDPOINT [ID] --data JSON`` -- ``update_data``,
  ``update_data_raw`` or, without an ID, ``update_data_full_url``.
* ``ctcli put ENDPOINT --data JSON`` -- ``put_data``.
* ``ctcli delete ENDPOINT [ID]`` -- ``delete_by_id`` / ``delete_by_url``.

Endpoints are paths relative to the base address, e.g.
``api/v1/vault/keys2``.
"""

from __future__ import annotations

from typing import Optional

import typer

from ctcli.commands.common import load_payload, open_client, reported_errors
from ctcli.exceptions import InvalidUsageError
from ctcli.output import format_response, info, print_data, success

_DATA_HELP = "JSON request body, or @file.json to read it from a file."
_FIELD_HELP = "Field path to print from the response (e.g. 'id', 'resources.0.name')."
_RAW_HELP = "Print the whole response body instead of one field."


def login_command(
    ctx: typer.Context,
    show_token: bool = typer.Option(
        False, "--show-token", help="Print the bearer token to stdout."
    ),
) -> None:
    """Sign in and report whether the credentials were accepted.

    Example::

        ctcli --address https://cm.example.com --username admin login
        ctcli login --show-token > token.txt
    """
    with reported_errors():
        with open_client(ctx) as client:
            success(f"Signed in to {client.base_url} as {client.credentials.username}")
            if show_token:
                print_data(client.token)


def list_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Collection path, e.g. api/v1/usermgmt/users."),
) -> None:
    """List a collection and print its ``resources`` array.

    Example::

        ctcli list api/v1/vault/keys2
    """
    with reported_errors():
        with open_client(ctx) as client:
            format_response(client.get_all(endpoint))


def get_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Collection path."),
    id: str = typer.Argument(help="Object ID, or 'all' to read the collection itself."),
) -> None:
    """Fetch one object and print the response body.

    Example::

        ctcli get api/v1/vault/keys2 3e2f...
        ctcli get api/v1/cluster all
    """
    with reported_errors():
        with open_client(ctx) as client:
            format_response(client.read_data_by_param(id, endpoint))


def create_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Collection path."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help=_DATA_HELP),
    field: str = typer.Option("id", "--field", "-f", help=_FIELD_HELP),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
) -> None:
    """Create an object and print its ID (or another field, or the whole body).

    Example::

        ctcli create api/v1/vault/keys2 -d '{"name": "k1", "algorithm": "aes"}'
    """
    with reported_errors():
        payload = load_payload(data)
        with open_client(ctx) as client:
            if raw:
                format_response(client.post_data_raw(endpoint, payload))
            else:
                format_response(client.post_data(endpoint, payload, field))


def update_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Collection path, or the full object path when ID is omitted."),
    id: Optional[str] = typer.Argument(None, help="Object ID appended to ENDPOINT."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help=_DATA_HELP),
    field: str = typer.Option("id", "--field", "-f", help=_FIELD_HELP),
    raw: bool = typer.Option(False, "--raw", help=_RAW_HELP),
) -> None:
    """PATCH an object and print a field of the answer.

    Example::

        ctcli update api/v1/vault/keys2 3e2f... -d '{"meta": {"owner": "ops"}}'
        ctcli update api/v1/cckm/aws/custom-key-stores/ks1/connect
    """
    with reported_errors():
        payload = load_payload(data)
        if raw and id is None:
            raise InvalidUsageError("--raw needs an ID")
        with open_client(ctx) as client:
            if id is None:
                result = client.update_data_full_url(endpoint, payload, field)
            elif raw:
                result = client.update_data_raw(id, endpoint, payload)
            else:
                result = client.update_data(id, endpoint, payload, field)
            format_response(result)


def put_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Object path."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help=_DATA_HELP),
) -> None:
    """PUT to a path and print the response body."""
    with reported_errors():
        payload = load_payload(data)
        with open_client(ctx) as client:
            format_response(client.put_data(endpoint, payload))


def delete_command(
    ctx: typer.Context,
    endpoint: str = typer.Argument(help="Collection path, or the full object path when ID is omitted."),
    id: Optional[str] = typer.Argument(None, help="Object ID appended to ENDPOINT."),
    method: str = typer.Option(
        "DELETE", "--method", "-X", help="HTTP method; some endpoints archive with PATCH or POST."
    ),
    data: Optional[str] = typer.Option(None, "--data", "-d", help=_DATA_HELP),
) -> None:
    """Delete an object.

    Example::

        ctcli delete api/v1/vault/keys2 3e2f...
        ctcli delete api/v1/vault/keys2/3e2f.../archive -X POST
    """
    with reported_errors():
        payload = load_payload(data)
        method = method.upper()
        with open_client(ctx) as client:
            if id is None and method == "DELETE" and payload is None:
                result = client.delete_by_url(endpoint)
                target = endpoint
            else:
                url = client.endpoint_url(endpoint, id) if id is not None else client.endpoint_url(endpoint)
                result = client.delete_by_id(method, url, payload)
                target = url
            if result:
                format_response(result)
            else:
                info(f"{method} {target}: done")
