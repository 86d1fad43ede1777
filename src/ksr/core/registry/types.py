"""Type definitions for Schema Registry operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

LATEST = "latest"

VersionSelector = int | Literal["latest"]

SCHEMA_TYPE_AVRO = "AVRO"
SCHEMA_TYPE_JSON = "JSON"
SCHEMA_TYPE_PROTOBUF = "PROTOBUF"

# Schema types whose payload must be well-formed JSON
JSON_PAYLOAD_SCHEMA_TYPES = frozenset({SCHEMA_TYPE_AVRO, SCHEMA_TYPE_JSON})

# Registry error codes (Confluent-compatible)
ERROR_CODE_SUBJECT_NOT_FOUND = 40401
ERROR_CODE_VERSION_NOT_FOUND = 40402
ERROR_CODE_SUBJECT_MODE_NOT_FOUND = 40409
ERROR_CODE_INVALID_SCHEMA = 42201
ERROR_CODE_OPERATION_NOT_PERMITTED = 42205


class CompatibilityLevel(str, Enum):
    """Rule class the registry enforces when accepting a new version."""

    NONE = "NONE"
    BACKWARD = "BACKWARD"
    BACKWARD_TRANSITIVE = "BACKWARD_TRANSITIVE"
    FORWARD = "FORWARD"
    FORWARD_TRANSITIVE = "FORWARD_TRANSITIVE"
    FULL = "FULL"
    FULL_TRANSITIVE = "FULL_TRANSITIVE"


class RegistryMode(str, Enum):
    """Registry-wide or subject-wide operating state."""

    READWRITE = "READWRITE"
    READONLY = "READONLY"
    IMPORT = "IMPORT"


@dataclass(frozen=True)
class SchemaReference:
    """Named reference from one schema to a subject/version pair."""

    name: str
    subject: str
    version: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "subject": self.subject, "version": self.version}

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "SchemaReference":
        return SchemaReference(
            name=str(data["name"]),
            subject=str(data["subject"]),
            version=int(data["version"]),
        )


@dataclass(frozen=True)
class RegistryConfig:
    """Compatibility configuration, copied verbatim between registries.

    The registry reports `compatibilityLevel` on reads and accepts
    `compatibility` on writes; both are carried so a value read from one
    registry can be written to another unchanged.
    """

    compatibility: str | None = None
    compatibility_level: str | None = None
    alias: str | None = None
    normalize: bool = False
    default_to_global_config: bool = False
    validate_fields: bool = False
    use_latest_version: bool = False
    use_schemas_from_latest_subject: bool = False

    @property
    def level(self) -> str | None:
        """Effective compatibility level, whichever field carries it."""
        return self.compatibility or self.compatibility_level

    def to_dict(self) -> dict[str, Any]:
        """Convert to registry wire format, omitting unset values."""
        data: dict[str, Any] = {}
        if self.compatibility:
            data["compatibility"] = self.compatibility
        if self.compatibility_level:
            data["compatibilityLevel"] = self.compatibility_level
        if self.alias:
            data["alias"] = self.alias
        if self.normalize:
            data["normalize"] = True
        if self.default_to_global_config:
            data["defaultToGlobalConfig"] = True
        if self.validate_fields:
            data["validateFields"] = True
        if self.use_latest_version:
            data["useLatestVersion"] = True
        if self.use_schemas_from_latest_subject:
            data["useSchemasFromLatestSubject"] = True
        return data

    def to_update_request(self) -> dict[str, Any]:
        """Body for PUT /config: the level always travels as `compatibility`."""
        data = self.to_dict()
        data.pop("compatibilityLevel", None)
        if self.level:
            data["compatibility"] = self.level
        return data

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "RegistryConfig":
        return RegistryConfig(
            compatibility=data.get("compatibility"),
            compatibility_level=data.get("compatibilityLevel"),
            alias=data.get("alias"),
            normalize=bool(data.get("normalize", False)),
            default_to_global_config=bool(data.get("defaultToGlobalConfig", False)),
            validate_fields=bool(data.get("validateFields", False)),
            use_latest_version=bool(data.get("useLatestVersion", False)),
            use_schemas_from_latest_subject=bool(data.get("useSchemasFromLatestSubject", False)),
        )


@dataclass(frozen=True)
class Schema:
    """A schema version as returned by the registry."""

    subject: str
    version: int
    schema_id: int
    schema: str
    schema_type: str | None = None
    references: tuple[SchemaReference, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "subject": self.subject,
            "version": self.version,
            "id": self.schema_id,
            "schema": self.schema,
        }
        if self.schema_type:
            data["schemaType"] = self.schema_type
        if self.references:
            data["references"] = [ref.to_dict() for ref in self.references]
        return data


@dataclass(frozen=True)
class SchemaRequest:
    """Body of a schema registration.

    `schema_id` and `version` are only honoured by a registry in IMPORT mode.
    """

    schema: str
    schema_type: str | None = None
    references: tuple[SchemaReference, ...] = ()
    schema_id: int | None = None
    version: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"schema": self.schema}
        if self.schema_type:
            data["schemaType"] = self.schema_type
        if self.references:
            data["references"] = [ref.to_dict() for ref in self.references]
        if self.schema_id is not None:
            data["id"] = self.schema_id
        if self.version is not None:
            data["version"] = self.version
        return data


@dataclass(frozen=True)
class RegistryConnectionSettings:
    """Connection settings for the HTTP registry client."""

    base_url: str
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    timeout_seconds: float = 30.0
    insecure: bool = False


class RegistryError(Exception):
    """Error response from the Schema Registry."""

    def __init__(self, status_code: int, message: str, error_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.error_code is None:
            return f"HTTP {self.status_code}: {self.message}"
        return f"HTTP {self.status_code}: {self.message} (code: {self.error_code})"

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class RegistryConnectionError(RegistryError):
    """The registry could not be reached."""

    def __init__(self, message: str) -> None:
        super().__init__(status_code=0, message=message)

    def __str__(self) -> str:
        return f"failed to connect to Schema Registry: {self.message}"


@dataclass(frozen=True)
class CompatibilityResult:
    """Answer to a compatibility check of a candidate schema against a subject version."""

    is_compatible: bool
    messages: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"is_compatible": self.is_compatible}
        if self.messages:
            data["messages"] = list(self.messages)
        return data

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "CompatibilityResult":
        return CompatibilityResult(
            is_compatible=bool(data.get("is_compatible", False)),
            messages=tuple(str(message) for message in data.get("messages") or []),
        )


@dataclass(frozen=True)
class RegistryInfo:
    """Server metadata; fields are None when the registry does not report them."""

    version: str | None = None
    commit: str | None = None
    kafka_cluster_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.version:
            data["version"] = self.version
        if self.commit:
            data["commit"] = self.commit
        if self.kafka_cluster_id:
            data["kafka_cluster_id"] = self.kafka_cluster_id
        return data
