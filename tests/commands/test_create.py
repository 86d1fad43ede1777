"""Tests for `ksr create schema`."""

import json
from pathlib import Path

from click.testing import CliRunner

from ksr.cli.cli import cli
from ksr.core.context import KsrContext
from ksr.core.registry.fake import FakeSchemaRegistry
from ksr.core.registry.types import RegistryMode
from tests.test_utils.schemas import MALFORMED, PROTO_USER, USER_V1, USER_V2, make_schema


def test_create_schema_inline() -> None:
    """--schema registers the definition and prints the new ID."""
    registry = FakeSchemaRegistry()
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--schema", USER_V1, "-o", "json"],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 0, result.output
    assert "Schema registered successfully with ID: 1" in result.output
    assert json.loads(result.stdout) == {"id": 1}
    assert [s.schema for s in registry.versions_of("users-value")] == [USER_V1]


def test_create_schema_from_file_with_type(tmp_path: Path) -> None:
    """--file is read and --type travels with the registration."""
    schema_file = tmp_path / "user.json"
    schema_file.write_text('{"type":"object","properties":{"id":{"type":"integer"}}}')
    registry = FakeSchemaRegistry()
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--file", str(schema_file), "--type", "JSON"],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 0, result.output
    subject, request, _ = registry.registered[0]
    assert subject == "users-value"
    assert request.schema_type == "JSON"
    assert "ID" in result.stdout


def test_create_schema_inline_wins_over_file(tmp_path: Path) -> None:
    """When both are given, --schema is used."""
    schema_file = tmp_path / "user.avsc"
    schema_file.write_text(USER_V2)
    registry = FakeSchemaRegistry()
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--schema", USER_V1, "--file", str(schema_file)],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 0, result.output
    assert registry.registered[0][1].schema == USER_V1


def test_create_schema_from_stdin() -> None:
    """Without --schema or --file the definition is read from standard input."""
    registry = FakeSchemaRegistry(
        subjects={"users-value": [make_schema("users-value", 1, 7, USER_V1)]}
    )
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "-o", "json"],
        input=USER_V2,
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"id": 8}
    assert [s.version for s in registry.versions_of("users-value")] == [1, 2]


def test_create_schema_without_input_fails() -> None:
    """Empty standard input and no flags is an error."""
    runner = CliRunner()

    result = runner.invoke(
        cli, ["create", "schema", "users-value"], input="", obj=KsrContext.for_test()
    )

    assert result.exit_code == 1
    assert "no schema provided: use --file, --schema, or pipe schema via stdin" in result.output


def test_create_schema_rejects_malformed_json_before_calling_registry() -> None:
    """AVRO definitions must parse as JSON; nothing is sent otherwise."""
    registry = FakeSchemaRegistry()
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--schema", MALFORMED],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 1
    assert "invalid schema JSON" in result.output
    assert registry.registered == []


def test_create_protobuf_schema_is_not_json_checked() -> None:
    """PROTOBUF definitions go to the registry as-is."""
    registry = FakeSchemaRegistry()
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--schema", PROTO_USER, "-t", "PROTOBUF"],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 0, result.output
    assert registry.registered[0][1].schema_type == "PROTOBUF"


def test_create_schema_registry_refusal() -> None:
    """A registry error exits 1 with the registry's message."""
    registry = FakeSchemaRegistry(global_mode=RegistryMode.READONLY)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["create", "schema", "users-value", "--schema", USER_V1, "--context", ".staging"],
        obj=KsrContext.for_test(registry=registry),
    )

    assert result.exit_code == 1
    assert "failed to register schema" in result.output
    assert "read-only mode" in result.output
    assert registry.registered[0][2] == ".staging"
