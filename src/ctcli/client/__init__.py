"""HTTP client module for ctcli.

Provides the authenticated :class:`Client` and the unauthenticated
:class:`BootstrapClient`, both wrapping :class:`httpx.Client` with a fixed
timeout and a configurable TLS policy (verification off by default).

Functions:
    :func:`new_client` -- build a client, signing in when credentials are given.
    :func:`new_bootstrap_client` -- build a bootstrap client.
    :func:`connect` -- build whichever client a :class:`~ctcli.models.ClientSettings` calls for.
    :func:`sign_in` -- exchange credentials for a bearer token.
    :func:`extract` -- pull a value out of a JSON body by field path.

Classes:
    :class:`KeyedLock` -- per-key locks for serialising changes to one remote
        object across threads sharing a client.

Example::

    from ctcli.client import new_client

    with new_client("https://cm.example.com", username="admin", password=pw) as client:
        key_id = client.post_data("api/v1/vault/keys2", {"name": "k1"}, "id")
"""

from ctcli.client.auth import sign_in
from ctcli.client.bootstrap import BootstrapClient, new_bootstrap_client
from ctcli.client.extract import extract
from ctcli.client.sync_client import Client, connect, new_client
from ctcli.locks import KeyedLock

__all__ = [
    "BootstrapClient",
    "Client",
    "KeyedLock",
    "connect",
    "extract",
    "new_bootstrap_client",
    "new_client",
    "sign_in",
]
