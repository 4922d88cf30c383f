"""Authenticated client for the appliance REST API.

This module provides :class:`Client`, the long-lived handle every caller
shares, and the constructors :func:`new_client` and :func:`connect`.

A client is built once per configuration. When credentials are supplied
it signs in immediately and keeps the token for its whole life; when they
are not, it stays unauthenticated and sends no ``Authorization`` header.

The CRUD primitives compose ``<base>/<endpoint>[/<id>]``, encode the
payload, dispatch through :meth:`Client.do_request`, and either return
the raw body text or project one field out of it with
:func:`~ctcli.client.extract.extract`:

====================== ====== =========================== ==================
Primitive              Method URL                         Returns
====================== ====== =========================== ==================
get_all                GET    base/endpoint               ``resources``
get_by_id              GET    base/endpoint/id            raw body
read_data_by_param     GET    base/endpoint[/id]          raw body
post_data              POST   base/endpoint               field
post_data_raw          POST   base/endpoint               raw body
put_data               PUT    base/endpoint               raw body
update_data            PATCH  base/endpoint/id            field
update_data_raw        PATCH  base/endpoint/id            raw body
update_data_full_url   PATCH  base/endpoint               field
delete_by_id           any    caller's full URL           ``resources``
delete_by_url          DELETE base/endpoint               ``resources``
====================== ====== =========================== ==================

Errors from the dispatcher propagate unchanged from every primitive.

See Also:
    :class:`~ctcli.client.bootstrap.BootstrapClient` for the
    unauthenticated bootstrap variant.
"""

from __future__ import annotations

import threading
from typing import Optional, Union

import httpx

from ctcli.client.auth import sign_in
from ctcli.client.base import (
    BaseClient,
    Payload,
    body_text,
    build_http_client,
    normalize_address,
)
from ctcli.client.bootstrap import BootstrapClient, new_bootstrap_client
from ctcli.client.extract import extract
from ctcli.exceptions import ConfigurationError
from ctcli.models import DEFAULT_TIMEOUT, SIGN_IN_ENDPOINT, ClientSettings, Credentials
from ctcli.output import debug

COLLECTION_ID = "all"
"""Identifier that makes :meth:`Client.read_data_by_param` address the collection."""

RESOURCES_FIELD = "resources"


class Client(BaseClient):
    """Authenticated handle for the appliance REST API.

    Build it with :func:`new_client` rather than directly. The base address
    and credentials never change after construction. The token changes
    only through an explicit :meth:`sign_in`, which swaps it in a single
    assignment under a lock, so the client can be shared across threads.

    Args:
        base_url: Normalised base address.
        http: Transport with the configured timeout and TLS policy.
        credentials: Identity for sign-in, or ``None`` for an
            unauthenticated client.
        sign_in_endpoint: Path of the sign-in endpoint.

    Example::

        with new_client(address, username="admin", password=pw) as client:
            users = client.get_all("api/v1/usermgmt/users")
    """

    def __init__(
        self,
        base_url: str,
        http: httpx.Client,
        credentials: Optional[Credentials] = None,
        sign_in_endpoint: str = SIGN_IN_ENDPOINT,
    ) -> None:
        super().__init__(base_url, http)
        self._credentials = credentials
        self._sign_in_endpoint = sign_in_endpoint
        self._token = ""
        self._sign_in_lock = threading.Lock()

    @property
    def token(self) -> str:
        """The current bearer token (``""`` for an unauthenticated client)."""
        return self._token

    @property
    def credentials(self) -> Optional[Credentials]:
        return self._credentials

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def sign_in(self) -> str:
        """Sign in with the stored credentials and keep the new token.

        :func:`new_client` calls this once. Nothing calls it again on its
        own: a caller that knows its token has expired may call it to
        re-authenticate. Concurrent calls are serialised.

        Returns:
            The new token.

        Raises:
            ConfigurationError: If the client was built without credentials.
        """
        if self._credentials is None:
            raise ConfigurationError(
                "Client was created without credentials; cannot sign in"
            )
        with self._sign_in_lock:
            response = sign_in(self, self._credentials, self._sign_in_endpoint)
            self._token = response.token
        return self._token

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def do_request(self, request: httpx.Request, token: Optional[str] = None) -> bytes:
        """Send *request* with the bearer token and classify the answer.

        An empty token sends no ``Authorization`` header; HTTP/1.1 rejects
        a bare ``Bearer `` value.

        Args:
            request: A request from :meth:`build_request`, not sent before.
            token: Use this token instead of the stored one.

        Returns:
            The raw response body.

        Raises:
            ServerError: On a status outside the success set.
            TransportError: If the appliance cannot be reached.
        """
        bearer = self._token if token is None else token
        if bearer:
            request.headers["Authorization"] = f"Bearer {bearer}"
        else:
            request.headers.pop("Authorization", None)
        return self._send(request)

    def _call(self, method: str, url: str, payload: Payload = None) -> bytes:
        return self.do_request(self.build_request(method, url, payload))

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_all(self, endpoint: str) -> str:
        """List a collection and return its ``resources`` array as JSON text."""
        body = self._call("GET", self.endpoint_url(endpoint))
        return extract(body, RESOURCES_FIELD)

    def get_by_id(self, id: str, endpoint: str) -> str:
        """Fetch ``<endpoint>/<id>`` and return the body verbatim."""
        body = self._call("GET", self.endpoint_url(endpoint, id))
        return body_text(body)

    def read_data_by_param(self, id: str, endpoint: str) -> str:
        """Like :meth:`get_by_id`, except ``id == "all"`` reads the collection itself."""
        if id == COLLECTION_ID:
            url = self.endpoint_url(endpoint)
        else:
            url = self.endpoint_url(endpoint, id)
        return body_text(self._call("GET", url))

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def post_data(self, endpoint: str, payload: Payload, field: str = "id") -> str:
        """Create an object and return the value at *field* in the answer.

        Args:
            endpoint: Collection path.
            payload: Request body.
            field: Field path to extract, commonly ``"id"``.
        """
        debug(f"POST {endpoint}: extracting {field!r}")
        body = self._call("POST", self.endpoint_url(endpoint), payload)
        return extract(body, field)

    def post_data_raw(self, endpoint: str, payload: Payload = None) -> str:
        """POST to *endpoint* and return the body verbatim. The payload may be empty."""
        return body_text(self._call("POST", self.endpoint_url(endpoint), payload))

    def put_data(self, endpoint: str, payload: Payload = None) -> str:
        """PUT to *endpoint* and return the body verbatim."""
        return body_text(self._call("PUT", self.endpoint_url(endpoint), payload))

    def update_data(
        self,
        id: str,
        endpoint: str,
        payload: Payload = None,
        field: str = "id",
    ) -> str:
        """PATCH ``<endpoint>/<id>`` and return the value at *field* in the answer."""
        body = self._call("PATCH", self.endpoint_url(endpoint, id), payload)
        return extract(body, field)

    def update_data_raw(self, id: str, endpoint: str, payload: Payload = None) -> str:
        """PATCH ``<endpoint>/<id>`` and return the body verbatim."""
        return body_text(self._call("PATCH", self.endpoint_url(endpoint, id), payload))

    def update_data_full_url(
        self,
        endpoint: str,
        payload: Payload = None,
        field: str = "id",
    ) -> str:
        """PATCH *endpoint* as given, with no id segment appended, and extract *field*.

        For operations whose path already names the object, e.g.
        ``api/v1/cckm/aws/custom-key-stores/<id>/connect``.
        """
        body = self._call("PATCH", self.endpoint_url(endpoint), payload)
        return extract(body, field)

    # ------------------------------------------------------------------ #
    # Deletes
    # ------------------------------------------------------------------ #

    def delete_by_id(self, method: str, url: str, payload: Payload = None) -> str:
        """Send *method* to the full *url* and return ``resources`` as JSON text.

        The method is the caller's choice: ``DELETE`` usually, ``PATCH`` or
        ``POST`` for endpoints that archive or soft-delete. Build *url* with
        :meth:`endpoint_url`.
        """
        body = self._call(method, url, payload)
        return extract(body, RESOURCES_FIELD)

    def delete_by_url(self, endpoint: str) -> str:
        """DELETE *endpoint* (relative to the base) and return ``resources`` as JSON text."""
        body = self._call("DELETE", self.endpoint_url(endpoint))
        return extract(body, RESOURCES_FIELD)


# ---------------------------------------------------------------------- #
# Constructors
# ---------------------------------------------------------------------- #


def new_client(
    address: Optional[str] = None,
    auth_domain: Optional[str] = None,
    domain: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    *,
    verify_ssl: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    sign_in_endpoint: str = SIGN_IN_ENDPOINT,
    transport: Optional[httpx.BaseTransport] = None,
) -> Client:
    """Create a client and, when credentials are given, sign in.

    Args:
        address: Base address; ``None`` selects the default address.
        auth_domain: Domain the user was created in (``""`` is the root).
        domain: Domain to log in to (``""`` is the root).
        username: Username. ``None`` skips sign-in.
        password: Password. ``None`` skips sign-in.
        verify_ssl: Verify the appliance certificate.
        timeout: Whole-request timeout in seconds.
        sign_in_endpoint: Path of the sign-in endpoint.
        transport: Optional httpx transport override.

    Returns:
        The :class:`Client`, holding a token if it signed in.

    Raises:
        ConfigurationError: For a malformed address or an empty
            username/password.
        CtcliError: Whatever :func:`~ctcli.client.auth.sign_in` raises. No
            client is returned when sign-in fails.
    """
    base_url = normalize_address(address)
    http = build_http_client(verify_ssl=verify_ssl, timeout=timeout, transport=transport)

    if username is None or password is None:
        debug(f"No credentials for {base_url}; client is unauthenticated")
        return Client(base_url, http, sign_in_endpoint=sign_in_endpoint)

    credentials = Credentials(
        username=username,
        password=password,
        auth_domain=auth_domain or "",
        domain=domain or "",
    )
    client = Client(base_url, http, credentials=credentials, sign_in_endpoint=sign_in_endpoint)
    try:
        client.sign_in()
    except BaseException:
        http.close()
        raise
    return client


def connect(
    settings: ClientSettings,
    transport: Optional[httpx.BaseTransport] = None,
) -> Union[Client, BootstrapClient]:
    """Build the client *settings* call for.

    A bootstrap configuration gets a :class:`BootstrapClient`; anything
    else gets a :class:`Client`, signed in when a username and password
    are present.
    """
    if settings.bootstrap:
        return new_bootstrap_client(
            settings.address,
            verify_ssl=settings.verify_ssl,
            timeout=settings.timeout,
            transport=transport,
        )
    return new_client(
        settings.address,
        settings.auth_domain,
        settings.domain,
        settings.username,
        settings.password,
        verify_ssl=settings.verify_ssl,
        timeout=settings.timeout,
        sign_in_endpoint=settings.sign_in_endpoint,
        transport=transport,
    )
