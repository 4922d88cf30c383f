"""Shared test fixtures for ctcli.

Provides an isolated settings environment, output state management, a
scripted fake appliance for the HTTP layer, and a CLI runner. These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from ctcli.output import OutputFormat, OutputManager, reset_output, set_output

BASE = "https://cm.example.com"

SETTINGS_ENV_VARS = [
    "CIPHERTRUST_ADDRESS",
    "CIPHERTRUST_USERNAME",
    "CIPHERTRUST_PASSWORD",
    "CIPHERTRUST_DOMAIN",
    "CIPHERTRUST_AUTH_DOMAIN",
    "BOOTSTRAP",
    "NO_SSL_VERIFY",
    "REST_API_TIMEOUT",
    "CTCLI_CONFIG",
]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Settings isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings resolution to a temporary directory.

    Clears every settings environment variable, points ``CTCLI_CONFIG`` at
    ``tmp_path/config`` (which does not exist yet), sends XDG_DATA_HOME to
    ``tmp_path/data`` and disables colour so messages are not wrapped.

    Returns:
        The path the config file would be read from.
    """
    for var in SETTINGS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    config_path = tmp_path / "config"
    monkeypatch.setenv("CTCLI_CONFIG", str(config_path))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(tmp_path)
    return config_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Fake appliance
# ---------------------------------------------------------------------------


class FakeAppliance:
    """A scripted appliance behind an :class:`httpx.MockTransport`.

    Routes are keyed by ``(METHOD, path)``. Every request is recorded in
    :attr:`requests`, and the sign-in endpoint answers with a token unless
    a test scripts it differently.
    """

    def __init__(self, token: str = "tok-1") -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.on("POST", "/api/v1/auth/tokens", json={"jwt": token, "duration": 300})

    def on(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: Optional[str] = None,
    ) -> None:
        """Script the answer for ``METHOD path``."""

        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            if json is not None:
                return httpx.Response(status, json=json)
            return httpx.Response(status)

        self.routes[(method.upper(), path)] = respond

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text=f"no route for {request.method} {request.url.path}")
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        """Return the JSON body of a recorded request."""
        return json.loads(self.requests[index].content)


@pytest.fixture
def appliance() -> FakeAppliance:
    return FakeAppliance()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
