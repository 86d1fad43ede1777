"""Tests for RealSchemaRegistry request construction and error mapping.

The HTTP session is a mock; no network access happens.
"""

import json
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from ksr.core.registry.real import RealSchemaRegistry
from ksr.core.registry.types import (
    RegistryConfig,
    RegistryConnectionError,
    RegistryConnectionSettings,
    RegistryError,
    RegistryMode,
    SchemaRequest,
)


def _response(status: int, body: Any = None, text: str | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    if text is None:
        text = "" if body is None else json.dumps(body)
    response.text = text
    response.content = text.encode("utf-8")
    if body is None:
        response.json.side_effect = ValueError("no JSON")
    else:
        response.json.return_value = body
    return response


def _session(*responses: MagicMock) -> MagicMock:
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    return session


def _registry(session: MagicMock, **settings: Any) -> RealSchemaRegistry:
    return RealSchemaRegistry(
        RegistryConnectionSettings(base_url="http://registry:8081/", **settings), session=session
    )


def test_api_key_takes_precedence_over_basic_auth() -> None:
    """A configured API key is sent as a bearer token instead of basic auth."""
    session = _session()

    _registry(session, username="alice", password="secret", api_key="k-123")

    assert session.headers["Authorization"] == "Bearer k-123"
    assert session.headers["Accept"] == "application/vnd.schemaregistry.v1+json"


def test_basic_auth_and_insecure_flags_configure_session() -> None:
    """Username/password become session auth; insecure disables TLS verification."""
    session = _session()

    _registry(session, username="alice", password="secret", insecure=True)

    assert session.auth == ("alice", "secret")
    assert session.verify is False
    assert "Authorization" not in session.headers


def test_list_subjects_sends_context_query_parameter() -> None:
    """A named context travels as ?context=..., with the configured timeout."""
    session = _session(_response(200, ["orders-value", "users-value"]))
    registry = _registry(session, timeout_seconds=5.0)

    subjects = registry.list_subjects(".staging")

    assert subjects == ["orders-value", "users-value"]
    session.request.assert_called_once_with(
        "GET",
        "http://registry:8081/subjects",
        json=None,
        params={"context": ".staging"},
        timeout=5.0,
    )


def test_default_context_sends_no_query_parameter() -> None:
    """The "." context is the registry default and is not sent."""
    session = _session(_response(200, []))
    registry = _registry(session)

    registry.list_subjects(".")

    assert session.request.call_args.kwargs["params"] is None


def test_get_schema_parses_response_and_quotes_subject() -> None:
    """Schema responses become Schema values; subject names are URL-quoted."""
    body = {
        "subject": "team/users",
        "version": 2,
        "id": 42,
        "schema": '{"type":"string"}',
        "schemaType": "JSON",
        "references": [{"name": "common", "subject": "common-value", "version": 1}],
    }
    session = _session(_response(200, body))
    registry = _registry(session)

    schema = registry.get_schema("team/users", "latest", None)

    assert session.request.call_args.args[1] == (
        "http://registry:8081/subjects/team%2Fusers/versions/latest"
    )
    assert schema.schema_id == 42
    assert schema.version == 2
    assert schema.schema_type == "JSON"
    assert schema.references[0].subject == "common-value"


def test_register_schema_posts_id_and_version_when_given() -> None:
    """Explicit IDs and versions are included in the registration body."""
    session = _session(_response(200, {"id": 101}))
    registry = _registry(session)

    schema_id = registry.register_schema(
        "users-value", SchemaRequest(schema="{}", schema_id=101, version=1), None
    )

    assert schema_id == 101
    assert session.request.call_args.kwargs["json"] == {"schema": "{}", "id": 101, "version": 1}


def test_error_response_becomes_registry_error() -> None:
    """Registry error bodies are mapped to RegistryError with the error code."""
    session = _session(
        _response(404, {"error_code": 40401, "message": "Subject 'x' not found."})
    )
    registry = _registry(session)

    with pytest.raises(RegistryError) as exc_info:
        registry.list_versions("x", None)

    assert exc_info.value.is_not_found
    assert str(exc_info.value) == "HTTP 404: Subject 'x' not found. (code: 40401)"


def test_non_json_error_body_is_reported_verbatim() -> None:
    """An error without a JSON body keeps the raw text."""
    session = _session(_response(502, None, text="Bad Gateway"))
    registry = _registry(session)

    with pytest.raises(RegistryError) as exc_info:
        registry.list_subjects(None)

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Bad Gateway"


def test_transport_failure_becomes_connection_error() -> None:
    """requests exceptions are wrapped as RegistryConnectionError."""
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = requests.ConnectionError("refused")
    registry = _registry(session)

    with pytest.raises(RegistryConnectionError) as exc_info:
        registry.list_subjects(None)

    assert "failed to connect to Schema Registry" in str(exc_info.value)


def test_missing_subject_config_returns_none() -> None:
    """Error code 40408 means the subject has no subject-level config."""
    session = _session(
        _response(404, {"error_code": 40408, "message": "Subject does not have config"})
    )
    registry = _registry(session)

    assert registry.get_subject_config("users-value", None) is None
    assert session.request.call_args.kwargs["params"] == {"defaultToGlobal": "false"}


@pytest.mark.parametrize(
    "body",
    [
        {"error_code": 40401, "message": "Subject 'users-value' not found."},
        {"message": "Not Found"},
    ],
)
def test_subject_config_404_without_config_code_returns_none(body: dict[str, Any]) -> None:
    """Any 404 from GET /config/{subject} means there is no subject-level config."""
    session = _session(_response(404, body))
    registry = _registry(session)

    assert registry.get_subject_config("users-value", None) is None


def test_subject_config_server_error_still_raises() -> None:
    """Only a 404 is treated as absence; other failures propagate."""
    session = _session(_response(500, {"error_code": 50001, "message": "boom"}))
    registry = _registry(session)

    with pytest.raises(RegistryError) as exc_info:
        registry.get_subject_config("users-value", None)

    assert exc_info.value.status_code == 500


def test_set_global_config_sends_level_as_compatibility() -> None:
    """Config updates always carry the level under the "compatibility" key."""
    session = _session(_response(200, {"compatibility": "FULL"}))
    registry = _registry(session)

    result = registry.set_global_config(RegistryConfig(compatibility_level="FULL"), None)

    assert session.request.call_args.kwargs["json"] == {"compatibility": "FULL"}
    assert result.level == "FULL"


def test_mode_round_trip_and_permanent_delete() -> None:
    """Mode reads parse the mode; permanent deletes send permanent=true."""
    session = _session(_response(200, {"mode": "IMPORT"}), _response(200, [1, 2]))
    registry = _registry(session)

    mode = registry.get_global_mode(None)
    deleted = registry.delete_subject("users-value", None, permanent=True)

    assert mode == RegistryMode.IMPORT
    assert deleted == [1, 2]
    assert session.request.call_args.kwargs["params"] == {"permanent": "true"}


def test_check_compatibility_posts_candidate_without_id_or_version() -> None:
    """The candidate is posted to /compatibility and the answer parsed."""
    session = _session(
        _response(200, {"is_compatible": False, "messages": ["field 'id' removed"]})
    )
    registry = _registry(session)

    result = registry.check_compatibility(
        "users-value",
        SchemaRequest(schema="{}", schema_type="JSON", schema_id=7, version=3),
        "latest",
        ".staging",
    )

    assert session.request.call_args.args == (
        "POST",
        "http://registry:8081/compatibility/subjects/users-value/versions/latest",
    )
    assert session.request.call_args.kwargs["json"] == {"schema": "{}", "schemaType": "JSON"}
    assert session.request.call_args.kwargs["params"] == {"context": ".staging"}
    assert result.is_compatible is False
    assert result.messages == ("field 'id' removed",)


def test_list_contexts_missing_endpoint_is_empty() -> None:
    """Registries without /contexts report no contexts."""
    session = _session(_response(404, {"error_code": 404, "message": "HTTP 404 Not Found"}))
    registry = _registry(session)

    assert registry.list_contexts() == []


def test_registry_info_reads_both_metadata_endpoints() -> None:
    """Version, commit and cluster ID come from the /v1/metadata endpoints."""
    session = _session(
        _response(200, {"version": "7.6.0", "commitId": "abc123"}),
        _response(200, {"scope": {"clusters": {"kafka-cluster": "cluster-1"}}}),
    )
    registry = _registry(session)

    info = registry.get_registry_info()

    assert info.to_dict() == {
        "version": "7.6.0",
        "commit": "abc123",
        "kafka_cluster_id": "cluster-1",
    }


def test_registry_info_tolerates_missing_metadata() -> None:
    """Unsupported metadata endpoints leave the fields unset."""
    session = _session(_response(404, {"message": "Not Found"}), _response(404, None, "nope"))
    registry = _registry(session)

    info = registry.get_registry_info()

    assert info.version is None
    assert info.kafka_cluster_id is None
