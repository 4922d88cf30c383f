"""ctcli -- REST client and command line for CipherTrust Manager.

This package wraps the appliance's REST API behind a small authenticated
client. A :class:`~ctcli.client.Client` signs in once with a username and
password, holds the returned bearer token, and exposes verb-shaped
primitives (``get_all``, ``get_by_id``, ``post_data``, ``update_data``,
``delete_by_id``, ...) that resource code builds on.

Typical workflow::

    from ctcli.client import new_client

    client = new_client("https://cm.example.com", username="admin", password="...")
    keys = client.get_all("api/v1/vault/keys2")

Modules:
    app: Typer application and CLI entry point.
    client: Sign-in, request dispatch, and CRUD primitives.
    config: Config file, environment, and override precedence.
    models: Pydantic models for credentials and settings.
    exceptions: Exception hierarchy with exit-code mapping.
    locks: Per-key locks for serialising changes to one remote object.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
