"""Exchange a username and password for a bearer token.

:func:`sign_in` is the only unauthenticated-by-nature call an
authenticated :class:`~ctcli.client.sync_client.Client` makes. It POSTs
the :class:`~ctcli.models.Credentials` as JSON to the sign-in endpoint
and reads the token from the ``jwt`` field of the answer.

It does not retry. Any failure aborts client construction, since nothing
else can work without a token once credentials were supplied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from ctcli.exceptions import ConfigurationError, DecodingError
from ctcli.models import SIGN_IN_ENDPOINT, AuthResponse, Credentials
from ctcli.output import debug

if TYPE_CHECKING:
    from ctcli.client.sync_client import Client

MISSING_CREDENTIALS = "Missing username or password for CipherTrust Manager login"


def sign_in(
    client: Client,
    credentials: Credentials,
    endpoint: str = SIGN_IN_ENDPOINT,
) -> AuthResponse:
    """Sign in to the appliance and return its token response.

    The request goes through the client's normal dispatcher, so a
    rejected login surfaces as a :class:`~ctcli.exceptions.ServerError`
    (``AuthError`` for 401/403) whose message carries the appliance's own
    explanation.

    Args:
        client: Client whose base address and transport are used.
        credentials: Identity to sign in with.
        endpoint: Sign-in path relative to the base address.

    Returns:
        The parsed :class:`~ctcli.models.AuthResponse`.

    Raises:
        ConfigurationError: If the username or password is empty. No
            request is sent in that case.
        EncodingError: If the credentials cannot be serialised.
        TransportError: If the appliance cannot be reached.
        ServerError: If the appliance rejects the request.
        DecodingError: If the answer is not JSON or has no ``jwt`` field.
    """
    if not credentials.username or not credentials.password:
        raise ConfigurationError(MISSING_CREDENTIALS)

    debug(f"Signing in as {credentials.username!r} (domain {credentials.domain!r})")
    request = client.build_request("POST", client.endpoint_url(endpoint), credentials)
    body = client.do_request(request)

    try:
        return AuthResponse.model_validate_json(body)
    except ValidationError as exc:
        raise DecodingError(f"Unexpected sign-in response: {exc}") from exc
