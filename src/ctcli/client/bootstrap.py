"""Unauthenticated client for the appliance's bootstrap endpoints.

A freshly installed appliance exposes a few endpoints (initial admin
password change, cluster join) that are called before any user can sign
in. :class:`BootstrapClient` talks to those. It has a base address and a
transport but no token, and its dispatcher never adds an
``Authorization`` header, whatever other clients exist in the process.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ctcli.client.base import (
    BaseClient,
    Payload,
    body_text,
    build_http_client,
    normalize_address,
)
from ctcli.client.extract import extract
from ctcli.models import DEFAULT_TIMEOUT


class BootstrapClient(BaseClient):
    """Client for bootstrap-only endpoints. Build it with :func:`new_bootstrap_client`."""

    def do_request(self, request: httpx.Request) -> bytes:
        """Send *request* without credentials and classify the answer.

        Same contract as :meth:`~ctcli.client.sync_client.Client.do_request`
        minus the bearer token.
        """
        request.headers.pop("Authorization", None)
        return self._send(request)

    def post_data(self, endpoint: str, payload: Payload, field: str = "id") -> str:
        """POST to *endpoint* and return the value at *field* in the answer."""
        request = self.build_request("POST", self.endpoint_url(endpoint), payload)
        return extract(self.do_request(request), field)

    def patch_data(self, endpoint: str, payload: Payload = None) -> str:
        """PATCH *endpoint* and return the body verbatim."""
        request = self.build_request("PATCH", self.endpoint_url(endpoint), payload)
        return body_text(self.do_request(request))


def new_bootstrap_client(
    address: Optional[str] = None,
    *,
    verify_ssl: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> BootstrapClient:
    """Create a :class:`BootstrapClient`. No request is sent.

    Raises:
        ConfigurationError: If *address* is malformed.
    """
    base_url = normalize_address(address)
    http = build_http_client(verify_ssl=verify_ssl, timeout=timeout, transport=transport)
    return BootstrapClient(base_url, http)
