"""Tests for registry, context, and subject descriptions."""

import pytest

from ksr.core.describe import (
    count_schema_fields,
    describe_context,
    describe_registry,
    describe_subject,
    suggested_commands,
)
from ksr.core.registry.fake import FakeSchemaRegistry
from ksr.core.registry.types import (
    RegistryConfig,
    RegistryConnectionError,
    RegistryError,
    RegistryInfo,
    RegistryMode,
)
from tests.test_utils.schemas import ORDER_V1, PROTO_USER, USER_V1, USER_V2, make_schema


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (USER_V2, 2),
        ('{"type":"object","properties":{"a":{},"b":{},"c":{}}}', 3),
        ('"string"', None),
        (PROTO_USER, None),
    ],
)
def test_count_schema_fields(payload: str, expected: int | None) -> None:
    """Avro fields and JSON Schema properties are counted; anything else is unknown."""
    assert count_schema_fields(payload) == expected


def test_suggested_commands_carry_context_flag() -> None:
    """Every suggestion is scoped to the described context."""
    commands = suggested_commands("users-value", ".dev")

    assert commands[0] == "ksr get schemas users-value --context .dev"
    assert all("--context .dev" in command for command in commands)
    assert "--context" not in " ".join(suggested_commands("users-value", None))


def test_describe_subject_collects_latest_schema_and_settings() -> None:
    """A subject description has its versions, latest schema, config and mode."""
    registry = FakeSchemaRegistry(
        subjects={
            "users-value": [
                make_schema("users-value", 1, 1, USER_V1),
                make_schema("users-value", 2, 2, USER_V2),
            ]
        },
        subject_configs={"users-value": RegistryConfig(compatibility_level="FULL")},
        subject_modes={"users-value": RegistryMode.READONLY},
    )

    description = describe_subject(registry, "users-value", None)

    data = description.to_dict()
    assert data["versions"] == [1, 2]
    assert data["latest_version"] == 2
    assert data["latest_schema"]["id"] == 2
    assert data["schema_type"] == "AVRO"
    assert data["field_count"] == 2
    assert data["config"] == {"compatibilityLevel": "FULL"}
    assert data["mode"] == "READONLY"
    assert len(data["suggested_commands"]) == 5


def test_describe_subject_tolerates_unreadable_mode() -> None:
    """Optional lookups that fail leave their field out."""
    registry = FakeSchemaRegistry(
        subjects={"orders-value": [make_schema("orders-value", 1, 1, ORDER_V1)]},
        mode_error=RegistryError(403, "forbidden"),
    )

    data = describe_subject(registry, "orders-value", None).to_dict()

    assert "mode" not in data
    assert "config" not in data
    assert data["field_count"] == 1


def test_describe_missing_subject_raises() -> None:
    """The version listing is required."""
    with pytest.raises(RegistryError) as exc_info:
        describe_subject(FakeSchemaRegistry(), "missing-value", None)

    assert exc_info.value.is_not_found


def test_describe_context_lists_subjects() -> None:
    """A context description counts and lists its subjects."""
    registry = FakeSchemaRegistry(
        context_subjects={
            ".dev": {
                "users-value": [make_schema("users-value", 1, 1, USER_V1)],
                "orders-value": [make_schema("orders-value", 1, 2, ORDER_V1)],
            }
        }
    )

    data = describe_context(registry, ".dev").to_dict()

    assert data["name"] == ".dev"
    assert data["subject_count"] == 2
    assert data["subjects"] == ["orders-value", "users-value"]
    assert data["config"] == {"compatibilityLevel": "BACKWARD"}
    assert data["mode"] == "READWRITE"


def test_describe_registry_overview() -> None:
    """A reachable registry reports info, counts, contexts, config and mode."""
    registry = FakeSchemaRegistry(
        subjects={"users-value": [make_schema("users-value", 1, 1, USER_V1)]},
        registry_info=RegistryInfo(version="7.6.0", commit="abc123"),
    )

    data = describe_registry(registry, "http://sr:8081", None).to_dict()

    assert data == {
        "url": "http://sr:8081",
        "is_accessible": True,
        "info": {"version": "7.6.0", "commit": "abc123"},
        "subject_count": 1,
        "contexts": ["."],
        "global_config": {"compatibilityLevel": "BACKWARD"},
        "global_mode": "READWRITE",
    }


def test_describe_unreachable_registry() -> None:
    """An unreachable registry is described without failing."""
    registry = FakeSchemaRegistry(list_error=RegistryConnectionError("connection refused"))

    data = describe_registry(registry, "http://sr:8081", None).to_dict()

    assert data == {"url": "http://sr:8081", "is_accessible": False}
