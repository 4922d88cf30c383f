"""Tests for the ctcli command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ctcli import __version__
from ctcli.app import app
from ctcli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


BASE = "https://cm.example.com"
KEYS = "api/v1/vault/keys2"
LOGIN = ["--address", BASE, "--username", "admin", "--password", "pw"]


@pytest.fixture(autouse=True)
def _isolated(isolated_config):
    yield


def _invoke(cli_runner, appliance, *args: str):
    return cli_runner.invoke(app, [*LOGIN, *args], obj={"transport": appliance.transport})


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"ctcli {__version__}" in result.output

    def test_help_lists_commands(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("login", "list", "get", "create", "update", "delete", "bootstrap", "config"):
            assert name in result.output


# ---------------------------------------------------------------------------
# login
# ---------------------------------------------------------------------------


class TestLogin:
    def test_success(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "login")

        assert result.exit_code == 0, result.output
        assert "Signed in to https://cm.example.com as admin" in result.output
        assert appliance.body(0)["username"] == "admin"

    def test_show_token(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "login", "--show-token")
        assert result.exit_code == 0
        assert "tok-1" in result.stdout

    def test_rejected(self, cli_runner, appliance) -> None:
        appliance.on("POST", "/api/v1/auth/tokens", status=401, text="Invalid user credentials")

        result = _invoke(cli_runner, appliance, "login")

        assert result.exit_code == EXIT_AUTH_FAILURE
        assert "status: 401, body: Invalid user credentials" in result.output

    def test_missing_credentials(self, cli_runner, appliance) -> None:
        result = cli_runner.invoke(
            app, ["--address", BASE, "login"], obj={"transport": appliance.transport}
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Missing username" in result.output
        assert appliance.requests == []

    def test_credentials_from_environment(self, cli_runner, appliance, monkeypatch) -> None:
        monkeypatch.setenv("CIPHERTRUST_ADDRESS", BASE)
        monkeypatch.setenv("CIPHERTRUST_USERNAME", "env-user")
        monkeypatch.setenv("CIPHERTRUST_PASSWORD", "env-pw")
        monkeypatch.setenv("CIPHERTRUST_DOMAIN", "dev")

        result = cli_runner.invoke(app, ["login"], obj={"transport": appliance.transport})

        assert result.exit_code == 0, result.output
        assert appliance.body(0) == {
            "username": "env-user",
            "password": "env-pw",
            "auth_domain": "",
            "domain": "dev",
        }

    def test_credentials_from_config_file(self, cli_runner, appliance, isolated_config: Path) -> None:
        isolated_config.write_text(f"address = {BASE}\nusername = file-user\npassword = file-pw\n")

        result = cli_runner.invoke(app, ["login"], obj={"transport": appliance.transport})

        assert result.exit_code == 0, result.output
        assert appliance.body(0)["username"] == "file-user"

    def test_bootstrap_mode_refused(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "--bootstrap", "login")
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Bootstrap mode is enabled" in result.output


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReads:
    def test_list(self, cli_runner, appliance) -> None:
        appliance.on("GET", f"/{KEYS}", json={"total": 1, "resources": [{"id": "a"}]})

        result = _invoke(cli_runner, appliance, "list", KEYS)

        assert result.exit_code == 0, result.output
        assert '[{"id":"a"}]' in result.stdout
        assert appliance.last().headers["Authorization"] == "Bearer tok-1"

    def test_verbose_traces_requests(self, cli_runner, appliance) -> None:
        appliance.on("GET", f"/{KEYS}", json={"resources": []})

        quiet = _invoke(cli_runner, appliance, "list", KEYS)
        loud = _invoke(cli_runner, appliance, "--verbose", "list", KEYS)

        assert "[debug]" not in quiet.output
        assert f"[debug] GET https://cm.example.com/{KEYS}" in loud.output
        assert "tok-1" not in loud.output

    def test_list_json_output(self, cli_runner, appliance) -> None:
        appliance.on("GET", f"/{KEYS}", json={"resources": [{"id": "a"}]})

        result = _invoke(cli_runner, appliance, "--json", "list", KEYS)

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [{"id": "a"}]

    def test_get(self, cli_runner, appliance) -> None:
        appliance.on("GET", f"/{KEYS}/k1", json={"id": "k1"})

        result = _invoke(cli_runner, appliance, "get", KEYS, "k1")

        assert result.exit_code == 0
        assert '"k1"' in result.stdout

    def test_get_all(self, cli_runner, appliance) -> None:
        appliance.on("GET", "/api/v1/cluster", json={"nodes": 3})

        result = _invoke(cli_runner, appliance, "get", "api/v1/cluster", "all")

        assert result.exit_code == 0
        assert appliance.last().url.path == "/api/v1/cluster"

    def test_not_found(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "get", KEYS, "missing")
        assert result.exit_code == EXIT_NOT_FOUND
        assert "status: 404" in result.output

    def test_output_file(self, cli_runner, appliance, tmp_path: Path) -> None:
        appliance.on("GET", f"/{KEYS}", json={"resources": []})
        target = tmp_path / "keys.json"

        result = _invoke(cli_runner, appliance, "-o", str(target), "list", KEYS)

        assert result.exit_code == 0
        assert target.read_text() == "[]\n"


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestWrites:
    def test_create_prints_id(self, cli_runner, appliance) -> None:
        appliance.on("POST", f"/{KEYS}", status=201, json={"id": "xyz", "name": "foo"})

        result = _invoke(cli_runner, appliance, "create", KEYS, "--data", '{"name": "foo"}')

        assert result.exit_code == 0, result.output
        assert result.stdout.strip().endswith("xyz")
        assert appliance.body() == {"name": "foo"}

    def test_create_from_file(self, cli_runner, appliance, tmp_path: Path) -> None:
        appliance.on("POST", f"/{KEYS}", json={"id": "xyz"})
        payload = tmp_path / "key.json"
        payload.write_text('{"name": "from-file"}')

        result = _invoke(cli_runner, appliance, "create", KEYS, "-d", f"@{payload}")

        assert result.exit_code == 0, result.output
        assert appliance.body() == {"name": "from-file"}

    def test_create_raw(self, cli_runner, appliance) -> None:
        appliance.on("POST", f"/{KEYS}", json={"id": "xyz", "name": "foo"})

        result = _invoke(cli_runner, appliance, "create", KEYS, "-d", "{}", "--raw")

        assert result.exit_code == 0
        assert '"name"' in result.stdout

    def test_create_bad_json(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "create", KEYS, "-d", "{name: foo}")

        assert result.exit_code == EXIT_INVALID_USAGE
        assert "not valid JSON" in result.output
        assert appliance.requests == []

    def test_create_missing_file(self, cli_runner, appliance, tmp_path: Path) -> None:
        result = _invoke(cli_runner, appliance, "create", KEYS, "-d", f"@{tmp_path / 'nope.json'}")
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_update_with_id(self, cli_runner, appliance) -> None:
        appliance.on("PATCH", f"/{KEYS}/k1", json={"id": "k1", "version": 2})

        result = _invoke(cli_runner, appliance, "update", KEYS, "k1", "-d", "{}", "-f", "version")

        assert result.exit_code == 0, result.output
        assert result.stdout.strip().endswith("2")

    def test_update_full_path(self, cli_runner, appliance) -> None:
        path = "api/v1/cckm/aws/custom-key-stores/ks1/connect"
        appliance.on("PATCH", f"/{path}", json={"id": "ks1"})

        result = _invoke(cli_runner, appliance, "update", path)

        assert result.exit_code == 0, result.output
        assert appliance.last().url.path == f"/{path}"

    def test_update_raw_needs_id(self, cli_runner, appliance) -> None:
        result = _invoke(cli_runner, appliance, "update", KEYS, "--raw")
        assert result.exit_code == EXIT_INVALID_USAGE

    def test_put(self, cli_runner, appliance) -> None:
        appliance.on("PUT", "/api/v1/configs/syslog", json={"enabled": True})

        result = _invoke(cli_runner, appliance, "put", "api/v1/configs/syslog", "-d", '{"enabled": true}')

        assert result.exit_code == 0, result.output
        assert appliance.last().method == "PUT"


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    def test_delete_by_id(self, cli_runner, appliance) -> None:
        appliance.on("DELETE", f"/{KEYS}/k1", status=204)

        result = _invoke(cli_runner, appliance, "delete", KEYS, "k1")

        assert result.exit_code == 0, result.output
        assert "done" in result.output
        assert appliance.last().method == "DELETE"

    def test_delete_with_method(self, cli_runner, appliance) -> None:
        appliance.on("POST", f"/{KEYS}/k1/archive", json={"resources": ["k1"]})

        result = _invoke(cli_runner, appliance, "delete", f"{KEYS}/k1/archive", "-X", "post")

        assert result.exit_code == 0, result.output
        assert appliance.last().method == "POST"
        assert '["k1"]' in result.stdout

    def test_delete_by_url(self, cli_runner, appliance) -> None:
        appliance.on("DELETE", f"/{KEYS}/k1", status=204)

        result = _invoke(cli_runner, appliance, "delete", f"{KEYS}/k1")

        assert result.exit_code == 0
        assert appliance.last().url.path == f"/{KEYS}/k1"

    def test_server_error_surfaces_body(self, cli_runner, appliance) -> None:
        appliance.on("DELETE", f"/{KEYS}/k1", status=500, text="boom")

        result = _invoke(cli_runner, appliance, "delete", KEYS, "k1")

        assert result.exit_code == EXIT_SERVER_ERROR
        assert "status: 500, body: boom" in result.output


# ---------------------------------------------------------------------------
# bootstrap
# ---------------------------------------------------------------------------


class TestBootstrap:
    def test_post_needs_only_address(self, cli_runner, appliance) -> None:
        appliance.on("POST", "/api/v1/cluster/new", status=201, json={"id": "node-1"})

        result = cli_runner.invoke(
            app,
            ["--address", BASE, "bootstrap", "post", "api/v1/cluster/new", "-d", "{}"],
            obj={"transport": appliance.transport},
        )

        assert result.exit_code == 0, result.output
        assert "node-1" in result.stdout
        assert len(appliance.requests) == 1
        assert "Authorization" not in appliance.last().headers

    def test_patch_ignores_credentials(self, cli_runner, appliance) -> None:
        appliance.on("PATCH", "/api/v1/auth/changepw", status=204)

        result = _invoke(cli_runner, appliance, "bootstrap", "patch", "api/v1/auth/changepw", "-d", "{}")

        assert result.exit_code == 0, result.output
        assert [r.url.path for r in appliance.requests] == ["/api/v1/auth/changepw"]
        assert "Authorization" not in appliance.last().headers


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_path(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert str(isolated_config) in result.stdout

    def test_show_masks_password(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [*LOGIN, "--json", "config", "show"])

        assert result.exit_code == 0, result.output
        rows = json.loads(result.stdout[result.stdout.index("[") :])
        settings = {row["setting"]: row["value"] for row in rows}
        assert settings["address"] == BASE
        assert settings["password"] == "********"
        assert "pw" not in result.stdout.replace("********", "")

    def test_show_reports_problems(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Missing address" in result.output

    def test_show_bad_value(self, cli_runner, monkeypatch) -> None:
        monkeypatch.setenv("REST_API_TIMEOUT", "soon")
        result = cli_runner.invoke(app, ["config", "show"])
        assert result.exit_code == EXIT_CONFIG_ERROR
