"""Pydantic models shared across ctcli modules.

The models fall into two groups:

**Session models** -- sent to or received from the appliance:
    :class:`Credentials` (the sign-in request body) and
    :class:`AuthResponse` (the sign-in response body).

**Configuration models** -- produced by :mod:`ctcli.config`:
    :class:`ClientSettings`.

All of them are frozen.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ADDRESS = "https://10.10.10.10"
"""Base address used when none is configured."""

DEFAULT_TIMEOUT = 180
"""Request timeout in seconds applied to every transport."""

SIGN_IN_ENDPOINT = "api/v1/auth/tokens"
"""Path, relative to the base address, that exchanges credentials for a token."""


# --- Session ---


class Credentials(BaseModel):
    """Identity used to sign in to the appliance.

    Serialised verbatim as the sign-in request body::

        {"username": "admin", "password": "...", "auth_domain": "", "domain": ""}

    The password is kept out of ``repr()`` so that tracing a model never
    leaks it.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
    auth_domain: str = ""
    domain: str = ""


class AuthResponse(BaseModel):
    """Sign-in response body. The appliance returns the token under ``jwt``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    token: str = Field(alias="jwt")


# --- Settings ---


class ClientSettings(BaseModel):
    """Effective connection settings after precedence resolution.

    ``None`` means "not configured". For ``username``/``password`` that is
    significant: a client built without them skips sign-in entirely.

    Example::

        ClientSettings(
            address="https://cm.example.com",
            username="admin",
            password="secret",
            verify_ssl=True,
        )
    """

    model_config = ConfigDict(frozen=True)

    address: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    auth_domain: str = ""
    domain: str = ""
    bootstrap: bool = False
    verify_ssl: bool = Field(
        default=False,
        description="Verify the appliance certificate",
    )
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds")
    sign_in_endpoint: str = SIGN_IN_ENDPOINT

    def masked(self) -> dict[str, object]:
        """Return the settings as a dict with the password replaced by ``********``."""
        data = self.model_dump()
        if data.get("password"):
            data["password"] = "********"
        return data
