"""Tests for `ksr export` commands."""

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from ksr.cli.cli import cli
from ksr.core.config_store import GlobalConfig
from ksr.core.context import KsrContext
from ksr.core.registry.fake import FakeSchemaRegistry
from ksr.core.registry.types import RegistryConfig, RegistryError
from ksr.core.snapshot.io import read_snapshot
from tests.test_utils.schemas import ORDER_V1, PAYMENT_V1, USER_V1, USER_V2, make_schema


def _registry(**kwargs) -> FakeSchemaRegistry:
    return FakeSchemaRegistry(
        subjects={
            "users-value": [
                make_schema("users-value", 1, 101, USER_V1),
                make_schema("users-value", 2, 102, USER_V2),
            ],
            "orders-value": [make_schema("orders-value", 1, 103, ORDER_V1)],
            "payments-value": [make_schema("payments-value", 1, 104, PAYMENT_V1)],
        },
        **kwargs,
    )


def test_export_subjects_to_stdout_as_json() -> None:
    """Without --file the snapshot is written to stdout."""
    # Arrange
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=_registry(), cli_version="9.9.9")

    # Act
    result = runner.invoke(cli, ["export", "subjects"], obj=ctx)

    # Assert
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [s["name"] for s in data["subjects"]] == [
        "orders-value",
        "payments-value",
        "users-value",
    ]
    assert data["metadata"]["cli_version"] == "9.9.9"
    assert data["metadata"]["exported_at"] == "2024-01-15T10:30:00+00:00"
    assert data["metadata"]["registry_url"] == "http://localhost:8081"
    assert data["config"] == {"compatibilityLevel": "BACKWARD"}


def test_export_subject_all_versions_to_file(tmp_path: Path) -> None:
    """--all-versions with --file captures every version with its source ID."""
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=_registry())
    out = tmp_path / "users.json"

    result = runner.invoke(
        cli, ["export", "subject", "users-value", "--all-versions", "-f", str(out)], obj=ctx
    )

    assert result.exit_code == 0, result.output
    assert f"Exported data to {out}" in result.output
    snapshot = read_snapshot(out)
    assert [(v.version, v.schema_id) for v in snapshot.subjects[0].versions] == [
        (1, 101),
        (2, 102),
    ]


def test_export_subjects_to_directory_writes_file_per_subject(tmp_path: Path) -> None:
    """--directory produces one standalone file per subject."""
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=_registry())
    directory = tmp_path / "exports"

    result = runner.invoke(cli, ["export", "subjects", "--directory", str(directory)], obj=ctx)

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in directory.iterdir()) == [
        "orders-value.json",
        "payments-value.json",
        "users-value.json",
    ]
    assert f"Exported subject 'users-value' to {directory / 'users-value.json'}" in result.output
    for path in directory.iterdir():
        assert len(read_snapshot(path).subjects) == 1


def test_no_include_config_omits_configuration() -> None:
    """--no-include-config leaves both config levels out."""
    runner = CliRunner()
    ctx = KsrContext.for_test(
        registry=_registry(subject_configs={"users-value": RegistryConfig(compatibility="NONE")})
    )

    result = runner.invoke(
        cli, ["export", "subject", "users-value", "--no-include-config"], obj=ctx
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert "config" not in data
    assert "config" not in data["subjects"][0]


def test_export_yaml_output() -> None:
    """-o yaml renders the snapshot as YAML."""
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=_registry())

    result = runner.invoke(cli, ["export", "subject", "orders-value", "-o", "yaml"], obj=ctx)

    assert result.exit_code == 0, result.output
    data = yaml.safe_load(result.stdout)
    assert data["subjects"][0]["versions"][0]["schema"] == ORDER_V1


def test_export_uses_configured_context() -> None:
    """The configured context is used when --context is absent."""
    registry = FakeSchemaRegistry(
        context_subjects={".staging": {"users-value": [make_schema("users-value", 1, 1, USER_V1)]}}
    )
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=registry, global_config=GlobalConfig(context=".staging"))

    result = runner.invoke(cli, ["export", "subjects"], obj=ctx)

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["metadata"]["context"] == ".staging"
    assert [s["name"] for s in data["subjects"]] == ["users-value"]


def test_export_failure_exits_with_error() -> None:
    """A registry failure aborts the export with a styled error."""
    runner = CliRunner()
    ctx = KsrContext.for_test(
        registry=_registry(subject_errors={"orders-value": RegistryError(500, "boom")})
    )

    result = runner.invoke(cli, ["export", "subjects"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: " in result.output
    assert "failed to export subject orders-value" in result.output


def test_file_and_directory_are_exclusive(tmp_path: Path) -> None:
    """--file and --directory cannot be combined."""
    runner = CliRunner()
    ctx = KsrContext.for_test(registry=_registry())

    result = runner.invoke(
        cli,
        ["export", "subjects", "-f", str(tmp_path / "a.json"), "--directory", str(tmp_path)],
        obj=ctx,
    )

    assert result.exit_code == 1
    assert "cannot be used together" in result.output
