"""Tests for `ksr config` commands."""

import json

from click.testing import CliRunner

from ksr.cli.cli import cli
from ksr.core.config_store import FakeConfigStore, GlobalConfig
from ksr.core.context import KsrContext
from ksr.core.registry.fake import FakeSchemaRegistry
from ksr.core.registry.types import RegistryConnectionError
from tests.test_utils.schemas import USER_V1, make_schema


def test_config_init_creates_defaults() -> None:
    """init writes a default config when none exists."""
    store = FakeConfigStore()
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "init"], obj=KsrContext.for_test(config_store=store))

    assert result.exit_code == 0, result.output
    assert "Configuration file created: /fake/ksr/config.toml" in result.output
    assert store.saved == [GlobalConfig()]


def test_config_init_leaves_existing_file() -> None:
    """init never overwrites an existing config."""
    store = FakeConfigStore(GlobalConfig(username="alice"))
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "init"], obj=KsrContext.for_test(config_store=store))

    assert result.exit_code == 0, result.output
    assert "Configuration file already exists" in result.output
    assert store.saved == []


def test_config_set_then_get() -> None:
    """set saves the value and get prints it back."""
    store = FakeConfigStore()
    runner = CliRunner()
    ctx = KsrContext.for_test(config_store=store)

    set_result = runner.invoke(
        cli, ["config", "set", "registry-url", "https://sr.example.com"], obj=ctx
    )
    get_result = runner.invoke(cli, ["config", "get", "registry-url"], obj=ctx)

    assert set_result.exit_code == 0, set_result.output
    assert "Configuration updated: registry-url = https://sr.example.com" in set_result.output
    assert store.saved[-1].registry_url == "https://sr.example.com"
    assert get_result.stdout == "registry-url = https://sr.example.com\n"


def test_config_get_unset_key() -> None:
    """Unset keys are reported as not set."""
    runner = CliRunner()
    ctx = KsrContext.for_test(config_store=FakeConfigStore(GlobalConfig()))

    result = runner.invoke(cli, ["config", "get", "api-key"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == "api-key is not set\n"


def test_config_rejects_unknown_key_and_invalid_value() -> None:
    """Keys must be known and values must parse."""
    store = FakeConfigStore()
    runner = CliRunner()
    ctx = KsrContext.for_test(config_store=store)

    unknown = runner.invoke(cli, ["config", "set", "colour", "red"], obj=ctx)
    invalid = runner.invoke(cli, ["config", "set", "timeout", "soon"], obj=ctx)

    assert unknown.exit_code == 1
    assert "invalid configuration key: colour" in unknown.output
    assert invalid.exit_code == 1
    assert store.saved == []


def test_config_list_json() -> None:
    """list prints every set key with its display value."""
    store = FakeConfigStore(GlobalConfig(username="alice", timeout=45.0))
    runner = CliRunner()

    result = runner.invoke(
        cli, ["config", "list", "-o", "json"], obj=KsrContext.for_test(config_store=store)
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "registry-url": "http://localhost:8081",
        "username": "alice",
        "output": "table",
        "timeout": "45s",
        "insecure": "false",
    }


def test_config_list_table() -> None:
    """The default list output is a KEY/VALUE table."""
    runner = CliRunner()
    ctx = KsrContext.for_test(config_store=FakeConfigStore(GlobalConfig()))

    result = runner.invoke(cli, ["config", "list"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "KEY" in result.output
    assert "registry-url" in result.output


def test_config_validate_reports_settings_and_connectivity() -> None:
    """validate shows the URL and auth method, then lists subjects to test the connection."""
    registry = FakeSchemaRegistry(
        subjects={"users-value": [make_schema("users-value", 1, 1, USER_V1)]}
    )
    ctx = KsrContext.for_test(
        registry=registry,
        global_config=GlobalConfig(registry_url="https://sr.example.com", api_key="secret"),
    )
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "validate"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert result.stdout == (
        "Registry URL: https://sr.example.com\n"
        "Authentication: API Key configured\n"
        "Connectivity: OK (1 subjects)\n"
    )


def test_config_validate_basic_auth_needs_both_credentials() -> None:
    """A username without a password is not basic auth."""
    runner = CliRunner()
    ctx = KsrContext.for_test(global_config=GlobalConfig(username="alice"))

    result = runner.invoke(cli, ["config", "validate"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Authentication: None configured" in result.stdout


def test_config_validate_fails_when_registry_unreachable() -> None:
    """A failed connectivity check exits 1 with the connection error."""
    registry = FakeSchemaRegistry(list_error=RegistryConnectionError("connection refused"))
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "validate"], obj=KsrContext.for_test(registry=registry))

    assert result.exit_code == 1
    assert "connectivity check failed" in result.output
    assert "connection refused" in result.output


def test_config_reset_restores_defaults() -> None:
    """reset replaces custom settings with the defaults."""
    store = FakeConfigStore(GlobalConfig(username="alice", output="json"))
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "reset"], obj=KsrContext.for_test(config_store=store))

    assert result.exit_code == 0, result.output
    assert "Configuration reset to defaults" in result.output
    assert store.reset_count == 1
    assert store.load() == GlobalConfig()
