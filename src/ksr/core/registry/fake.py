"""Fake Schema Registry operations for testing.

FakeSchemaRegistry is an in-memory implementation that accepts pre-configured
state in its constructor. Construct instances directly with keyword arguments.
"""

import json

from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.types import (
    ERROR_CODE_INVALID_SCHEMA,
    ERROR_CODE_OPERATION_NOT_PERMITTED,
    ERROR_CODE_SUBJECT_NOT_FOUND,
    ERROR_CODE_VERSION_NOT_FOUND,
    JSON_PAYLOAD_SCHEMA_TYPES,
    LATEST,
    SCHEMA_TYPE_AVRO,
    CompatibilityResult,
    RegistryConfig,
    RegistryError,
    RegistryInfo,
    RegistryMode,
    Schema,
    SchemaRequest,
    VersionSelector,
)

DEFAULT_CONTEXT = "."


def _normalize_context(context: str | None) -> str:
    if context is None or context == "":
        return DEFAULT_CONTEXT
    return context


def _payload_key(schema: str, schema_type: str | None, references: tuple) -> tuple:
    return (schema, schema_type or SCHEMA_TYPE_AVRO, references)


class FakeSchemaRegistry(SchemaRegistry):
    """In-memory fake implementation of Schema Registry operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty registry, BACKWARD
    compatibility, READWRITE mode).

    Behaves like a real registry where tests depend on it:
    - identical payloads share one schema ID across subjects
    - re-registering an identical payload in a subject returns the existing ID
    - AVRO and JSON payloads must be well-formed JSON
    - writes are refused in READONLY mode
    - explicit IDs and versions are honoured in IMPORT mode
    """

    def __init__(
        self,
        *,
        subjects: dict[str, list[Schema]] | None = None,
        context_subjects: dict[str, dict[str, list[Schema]]] | None = None,
        global_config: RegistryConfig | None = None,
        subject_configs: dict[str, RegistryConfig] | None = None,
        global_mode: RegistryMode = RegistryMode.READWRITE,
        subject_modes: dict[str, RegistryMode] | None = None,
        subject_errors: dict[str, RegistryError] | None = None,
        config_update_error: RegistryError | None = None,
        mode_error: RegistryError | None = None,
        list_error: RegistryError | None = None,
        incompatible: dict[str, list[str]] | None = None,
        registry_info: RegistryInfo | None = None,
    ) -> None:
        """Create FakeSchemaRegistry with pre-configured state.

        Args:
            subjects: Mapping of subject name -> versions in the default context
            context_subjects: Mapping of context -> subject name -> versions
            global_config: Global configuration (default: BACKWARD)
            subject_configs: Mapping of subject name -> subject-level configuration
            global_mode: Registry-wide mode
            subject_modes: Mapping of subject name -> subject-level mode
            subject_errors: Mapping of subject name -> error raised by any
                operation on that subject
            config_update_error: Error raised by every configuration update
            mode_error: Error raised by every mode read
            list_error: Error raised by every list_subjects() call
            incompatible: Mapping of subject name -> messages; compatibility checks
                against these subjects fail, all others pass
            registry_info: Server metadata reported by get_registry_info()
        """
        self._subjects: dict[str, dict[str, list[Schema]]] = {DEFAULT_CONTEXT: {}}
        for name, versions in (subjects or {}).items():
            self._subjects[DEFAULT_CONTEXT][name] = list(versions)
        for context, by_subject in (context_subjects or {}).items():
            bucket = self._subjects.setdefault(_normalize_context(context), {})
            for name, versions in by_subject.items():
                bucket[name] = list(versions)

        self._global_config = global_config or RegistryConfig(compatibility_level="BACKWARD")
        self._subject_configs = dict(subject_configs or {})
        self._global_mode = global_mode
        self._subject_modes = dict(subject_modes or {})
        self._subject_errors = subject_errors or {}
        self._config_update_error = config_update_error
        self._mode_error = mode_error
        self._list_error = list_error
        self._incompatible = incompatible or {}
        self._registry_info = registry_info or RegistryInfo()

        self._ids: dict[tuple, int] = {}
        for bucket in self._subjects.values():
            for versions in bucket.values():
                for schema in versions:
                    key = _payload_key(schema.schema, schema.schema_type, schema.references)
                    self._ids.setdefault(key, schema.schema_id)
        self._next_id = max(self._ids.values(), default=0) + 1

        self._registered: list[tuple[str, SchemaRequest, str]] = []
        self._global_config_updates: list[tuple[RegistryConfig, str]] = []
        self._subject_config_updates: list[tuple[str, RegistryConfig, str]] = []
        self._mode_updates: list[tuple[str | None, RegistryMode, str]] = []
        self._get_schema_calls: list[tuple[str, VersionSelector, str]] = []
        self._deleted_subjects: list[tuple[str, bool]] = []
        self._deleted_versions: list[tuple[str, int, bool]] = []
        self._compatibility_checks: list[tuple[str, SchemaRequest, VersionSelector, str]] = []

    @property
    def registered(self) -> list[tuple[str, SchemaRequest, str]]:
        """Read-only access to register_schema() calls for test assertions.

        Returns list of (subject, request, context) tuples, including failed attempts.
        """
        return self._registered

    @property
    def global_config_updates(self) -> list[tuple[RegistryConfig, str]]:
        return self._global_config_updates

    @property
    def subject_config_updates(self) -> list[tuple[str, RegistryConfig, str]]:
        return self._subject_config_updates

    @property
    def mode_updates(self) -> list[tuple[str | None, RegistryMode, str]]:
        """Mode changes as (subject or None for global, mode, context) tuples."""
        return self._mode_updates

    @property
    def get_schema_calls(self) -> list[tuple[str, VersionSelector, str]]:
        return self._get_schema_calls

    @property
    def deleted_subjects(self) -> list[tuple[str, bool]]:
        return self._deleted_subjects

    @property
    def deleted_versions(self) -> list[tuple[str, int, bool]]:
        return self._deleted_versions

    @property
    def compatibility_checks(self) -> list[tuple[str, SchemaRequest, VersionSelector, str]]:
        """check_compatibility() calls as (subject, request, version, context) tuples."""
        return self._compatibility_checks

    @property
    def mutation_count(self) -> int:
        """Total number of mutating calls made, successful or not."""
        return (
            len(self._registered)
            + len(self._global_config_updates)
            + len(self._subject_config_updates)
            + len(self._mode_updates)
            + len(self._deleted_subjects)
            + len(self._deleted_versions)
        )

    def versions_of(self, subject: str, context: str | None = None) -> list[Schema]:
        """Current versions of a subject, for test assertions."""
        return list(self._subjects.get(_normalize_context(context), {}).get(subject, []))

    def _check_subject(self, subject: str) -> None:
        error = self._subject_errors.get(subject)
        if error is not None:
            raise error

    def _bucket(self, context: str | None) -> dict[str, list[Schema]]:
        return self._subjects.setdefault(_normalize_context(context), {})

    def _existing_versions(self, subject: str, context: str | None) -> list[Schema]:
        versions = self._bucket(context).get(subject)
        if not versions:
            raise RegistryError(404, f"Subject '{subject}' not found.", ERROR_CODE_SUBJECT_NOT_FOUND)
        return versions

    def _effective_mode(self, subject: str) -> RegistryMode:
        return self._subject_modes.get(subject, self._global_mode)

    def list_subjects(self, context: str | None) -> list[str]:
        if self._list_error is not None:
            raise self._list_error
        return sorted(name for name, versions in self._bucket(context).items() if versions)

    def list_versions(self, subject: str, context: str | None) -> list[int]:
        self._check_subject(subject)
        return [schema.version for schema in self._existing_versions(subject, context)]

    def get_schema(self, subject: str, version: VersionSelector, context: str | None) -> Schema:
        self._get_schema_calls.append((subject, version, _normalize_context(context)))
        return self._find_version(subject, version, context)

    def _find_version(self, subject: str, version: VersionSelector, context: str | None) -> Schema:
        self._check_subject(subject)
        versions = self._existing_versions(subject, context)
        if version == LATEST:
            return versions[-1]
        for schema in versions:
            if schema.version == version:
                return schema
        raise RegistryError(404, f"Version {version} not found.", ERROR_CODE_VERSION_NOT_FOUND)

    def register_schema(self, subject: str, request: SchemaRequest, context: str | None) -> int:
        self._registered.append((subject, request, _normalize_context(context)))
        self._check_subject(subject)

        mode = self._effective_mode(subject)
        if mode == RegistryMode.READONLY:
            raise RegistryError(
                422,
                f"Subject {subject} is in read-only mode",
                ERROR_CODE_OPERATION_NOT_PERMITTED,
            )

        if (request.schema_type or SCHEMA_TYPE_AVRO) in JSON_PAYLOAD_SCHEMA_TYPES:
            try:
                json.loads(request.schema)
            except ValueError as e:
                raise RegistryError(422, f"Invalid schema: {e}", ERROR_CODE_INVALID_SCHEMA) from e

        key = _payload_key(request.schema, request.schema_type, request.references)
        versions = self._bucket(context).setdefault(subject, [])
        for schema in versions:
            if _payload_key(schema.schema, schema.schema_type, schema.references) == key:
                return schema.schema_id

        if mode == RegistryMode.IMPORT and request.schema_id is not None:
            schema_id = request.schema_id
            self._ids.setdefault(key, schema_id)
            self._next_id = max(self._next_id, schema_id + 1)
        elif key in self._ids:
            schema_id = self._ids[key]
        else:
            schema_id = self._next_id
            self._ids[key] = schema_id
            self._next_id += 1

        if mode == RegistryMode.IMPORT and request.version is not None:
            version = request.version
        else:
            version = (versions[-1].version + 1) if versions else 1

        versions.append(
            Schema(
                subject=subject,
                version=version,
                schema_id=schema_id,
                schema=request.schema,
                schema_type=request.schema_type,
                references=request.references,
            )
        )
        versions.sort(key=lambda schema: schema.version)
        return schema_id

    def get_global_config(self, context: str | None) -> RegistryConfig:
        return self._global_config

    def set_global_config(self, config: RegistryConfig, context: str | None) -> RegistryConfig:
        self._global_config_updates.append((config, _normalize_context(context)))
        if self._config_update_error is not None:
            raise self._config_update_error
        self._global_config = config
        return config

    def get_subject_config(self, subject: str, context: str | None) -> RegistryConfig | None:
        self._check_subject(subject)
        return self._subject_configs.get(subject)

    def set_subject_config(
        self, subject: str, config: RegistryConfig, context: str | None
    ) -> RegistryConfig:
        self._subject_config_updates.append((subject, config, _normalize_context(context)))
        if self._config_update_error is not None:
            raise self._config_update_error
        self._subject_configs[subject] = config
        return config

    def get_global_mode(self, context: str | None) -> RegistryMode:
        if self._mode_error is not None:
            raise self._mode_error
        return self._global_mode

    def set_global_mode(self, mode: RegistryMode, context: str | None) -> RegistryMode:
        self._mode_updates.append((None, mode, _normalize_context(context)))
        self._global_mode = mode
        return mode

    def get_subject_mode(self, subject: str, context: str | None) -> RegistryMode | None:
        if self._mode_error is not None:
            raise self._mode_error
        return self._subject_modes.get(subject)

    def set_subject_mode(
        self, subject: str, mode: RegistryMode, context: str | None
    ) -> RegistryMode:
        self._mode_updates.append((subject, mode, _normalize_context(context)))
        self._subject_modes[subject] = mode
        return mode

    def delete_subject(self, subject: str, context: str | None, *, permanent: bool) -> list[int]:
        self._deleted_subjects.append((subject, permanent))
        versions = self._existing_versions(subject, context)
        deleted = [schema.version for schema in versions]
        del self._bucket(context)[subject]
        return deleted

    def delete_subject_version(
        self, subject: str, version: int, context: str | None, *, permanent: bool
    ) -> None:
        self._deleted_versions.append((subject, version, permanent))
        versions = self._existing_versions(subject, context)
        remaining = [schema for schema in versions if schema.version != version]
        if len(remaining) == len(versions):
            raise RegistryError(404, f"Version {version} not found.", ERROR_CODE_VERSION_NOT_FOUND)
        self._bucket(context)[subject] = remaining

    def check_compatibility(
        self,
        subject: str,
        request: SchemaRequest,
        version: VersionSelector,
        context: str | None,
    ) -> CompatibilityResult:
        self._compatibility_checks.append((subject, request, version, _normalize_context(context)))
        self._find_version(subject, version, context)
        messages = self._incompatible.get(subject)
        if messages is not None:
            return CompatibilityResult(is_compatible=False, messages=tuple(messages))
        return CompatibilityResult(is_compatible=True)

    def list_contexts(self) -> list[str]:
        return sorted(self._subjects)

    def get_registry_info(self) -> RegistryInfo:
        return self._registry_info
