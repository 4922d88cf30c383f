"""Request dispatch shared by the authenticated and bootstrap clients.

Every call the client layer makes goes through :meth:`BaseClient._send`:
one fresh :class:`httpx.Request`, one round trip, the whole body read,
then a verdict. Success is exactly the status set in
:data:`SUCCESS_STATUSES`; anything else becomes a
:class:`~ctcli.exceptions.ServerError` (or its ``AuthError`` /
``NotFoundError`` subclasses) carrying the status code and the raw body.

There is no retry and no backoff here. httpx transport failures are
re-raised as :class:`~ctcli.exceptions.TransportError` with the
underlying text.

See Also:
    :class:`~ctcli.client.sync_client.Client` -- adds the bearer token.
    :class:`~ctcli.client.bootstrap.BootstrapClient` -- never sends one.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ctcli.exceptions import (
    ConfigurationError,
    EncodingError,
    TransportError,
    error_for_status,
)
from ctcli.models import DEFAULT_ADDRESS, DEFAULT_TIMEOUT
from ctcli.output import debug

SUCCESS_STATUSES = frozenset({200, 201, 202, 203, 204, 206})
"""HTTP statuses treated as success. 205 is not one of them."""

JSON_CONTENT_TYPE = "application/json"

Payload = Any
"""Request body: ``bytes``/``str`` are sent as-is, mappings, lists and
pydantic models are JSON encoded, ``None`` or empty means no body."""


def normalize_address(address: Optional[str]) -> str:
    """Return the base URL to join endpoint paths onto.

    ``None`` selects :data:`~ctcli.models.DEFAULT_ADDRESS`. Trailing slashes
    are dropped so ``<base>/<endpoint>`` never doubles them.

    Raises:
        ConfigurationError: If the address lacks an ``http``/``https``
            scheme or a host.
    """
    raw = DEFAULT_ADDRESS if address is None else address.strip()
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Invalid address {raw!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Invalid address {raw!r}: expected something like https://cm.example.com"
        )
    return raw.rstrip("/")


def build_http_client(
    verify_ssl: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create the :class:`httpx.Client` a client sends through.

    Args:
        verify_ssl: Verify the appliance certificate.
        timeout: Whole-request timeout in seconds.
        transport: Optional transport override (tests pass an
            :class:`httpx.MockTransport`).
    """
    return httpx.Client(
        timeout=timeout,
        verify=verify_ssl,
        transport=transport,
        follow_redirects=True,
    )


def encode_payload(payload: Payload) -> Optional[bytes]:
    """Encode a request body.

    Returns:
        The body bytes, or ``None`` when there is nothing to send.

    Raises:
        EncodingError: If *payload* cannot be JSON encoded.
    """
    if payload is None:
        return None
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload) or None
    if isinstance(payload, str):
        return payload.encode("utf-8") or None
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump_json(by_alias=True).encode("utf-8")
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot encode request payload as JSON: {exc}") from exc


def body_text(body: bytes) -> str:
    """Decode a response body for callers that want it verbatim."""
    return body.decode("utf-8", errors="replace")


class BaseClient:
    """Base address plus transport, and the single send-and-classify path.

    Subclasses decide which headers a request carries; see
    :meth:`~ctcli.client.sync_client.Client.do_request` and
    :meth:`~ctcli.client.bootstrap.BootstrapClient.do_request`.

    Args:
        base_url: Normalised base address (see :func:`normalize_address`).
        http: The transport; owned by this client and closed by :meth:`close`.
    """

    def __init__(self, base_url: str, http: httpx.Client) -> None:
        self._base_url = base_url
        self._http = http

    @property
    def base_url(self) -> str:
        return self._base_url

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def close(self) -> None:
        """Close the underlying transport."""
        self._http.close()

    def __enter__(self) -> BaseClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def endpoint_url(self, endpoint: str, *segments: str) -> str:
        """Join the base address, *endpoint*, and any extra path *segments* with ``/``.

        Example::

            client.endpoint_url("api/v1/vault/keys2", "k-123")
            # 'https://cm.example.com/api/v1/vault/keys2/k-123'
        """
        parts = [self._base_url, endpoint.lstrip("/"), *(str(s) for s in segments)]
        return "/".join(parts)

    def build_request(self, method: str, url: str, payload: Payload = None) -> httpx.Request:
        """Build a fresh request for *method* and full *url*.

        Raises:
            ConfigurationError: If *url* is malformed.
            EncodingError: If *payload* cannot be JSON encoded.
        """
        body = encode_payload(payload)
        try:
            return self._http.build_request(method.upper(), url, content=body)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"Invalid request URL {url!r}: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _send(self, request: httpx.Request) -> bytes:
        """Send *request*, read the full body, and classify the status.

        Returns:
            The raw body on a status in :data:`SUCCESS_STATUSES`.

        Raises:
            ServerError: On any other status, with the code and body text.
            TransportError: If the request never got an answer.
        """
        request.headers["Content-Type"] = JSON_CONTENT_TYPE
        debug(f"{request.method} {request.url}")
        try:
            response = self._http.send(request)
        except httpx.RequestError as exc:
            debug(f"{request.method} {request.url} failed: {exc!r}")
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc

        status = response.status_code
        debug(f"{request.method} {request.url} -> {status} ({len(response.content)} bytes)")
        if status in SUCCESS_STATUSES:
            return response.content
        raise error_for_status(status, response.text)
