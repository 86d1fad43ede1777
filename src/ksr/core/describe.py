"""Summaries of a registry, a context, or a subject for `ksr describe`.

Each description has one required lookup whose failure raises RegistryError;
every other lookup is best-effort and leaves its field unset when the
registry refuses it.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.types import (
    LATEST,
    SCHEMA_TYPE_AVRO,
    RegistryConfig,
    RegistryError,
    RegistryInfo,
    RegistryMode,
    Schema,
)

logger = logging.getLogger(__name__)


def _optional[T](call: Callable[[], T], what: str) -> T | None:
    try:
        return call()
    except RegistryError as e:
        logger.debug("Could not read %s: %s", what, e)
        return None


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


def count_schema_fields(schema: str) -> int | None:
    """Top-level field count: Avro record `fields` or JSON Schema `properties`.

    Returns None for payloads that are not JSON objects (e.g. Protobuf) or
    that declare neither.
    """
    try:
        parsed = json.loads(schema)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    fields = parsed.get("fields")
    if isinstance(fields, list):
        return len(fields)
    properties = parsed.get("properties")
    if isinstance(properties, dict):
        return len(properties)
    return None


def suggested_commands(subject: str, context: str | None) -> list[str]:
    """Follow-up commands for a subject, scoped to its context."""
    context_flag = f" --context {context}" if context else ""
    return [
        f"ksr get schemas {subject}{context_flag}",
        f"ksr get versions {subject}{context_flag}",
        f"ksr export subject {subject}{context_flag} -f {subject}.json",
        f"ksr check compatibility {subject} --file new-schema.avsc{context_flag}",
        f"ksr get config {subject}{context_flag}",
    ]


@dataclass(frozen=True)
class SubjectDescription:
    name: str
    versions: tuple[int, ...]
    latest_schema: Schema | None = None
    config: RegistryConfig | None = None
    mode: RegistryMode | None = None
    suggested_commands: tuple[str, ...] = ()

    @property
    def latest_version(self) -> int | None:
        return self.versions[-1] if self.versions else None

    @property
    def schema_type(self) -> str | None:
        if self.latest_schema is None:
            return None
        return self.latest_schema.schema_type or SCHEMA_TYPE_AVRO

    @property
    def field_count(self) -> int | None:
        if self.latest_schema is None:
            return None
        return count_schema_fields(self.latest_schema.schema)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "versions": list(self.versions),
                "latest_version": self.latest_version,
                "latest_schema": self.latest_schema.to_dict() if self.latest_schema else None,
                "schema_type": self.schema_type,
                "field_count": self.field_count,
                "config": self.config.to_dict() if self.config else None,
                "mode": self.mode.value if self.mode else None,
                "suggested_commands": list(self.suggested_commands),
            }
        )


@dataclass(frozen=True)
class ContextDescription:
    name: str
    subjects: tuple[str, ...]
    config: RegistryConfig | None = None
    mode: RegistryMode | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "name": self.name,
                "subject_count": len(self.subjects),
                "subjects": list(self.subjects),
                "config": self.config.to_dict() if self.config else None,
                "mode": self.mode.value if self.mode else None,
            }
        )


@dataclass(frozen=True)
class RegistryDescription:
    """Registry overview. When the registry is unreachable only `url` is filled in."""

    url: str
    is_accessible: bool
    info: RegistryInfo | None = None
    subject_count: int | None = None
    contexts: tuple[str, ...] | None = None
    global_config: RegistryConfig | None = None
    global_mode: RegistryMode | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "url": self.url,
                "is_accessible": self.is_accessible,
                "info": self.info.to_dict() if self.info else None,
                "subject_count": self.subject_count,
                "contexts": list(self.contexts) if self.contexts is not None else None,
                "global_config": self.global_config.to_dict() if self.global_config else None,
                "global_mode": self.global_mode.value if self.global_mode else None,
            }
        )


def describe_subject(
    registry: SchemaRegistry, subject: str, context: str | None
) -> SubjectDescription:
    """Describe one subject.

    Raises:
        RegistryError: If the subject's versions cannot be listed
    """
    versions = registry.list_versions(subject, context)
    latest = None
    if versions:
        latest = _optional(
            lambda: registry.get_schema(subject, LATEST, context), f"latest schema of {subject}"
        )
    return SubjectDescription(
        name=subject,
        versions=tuple(versions),
        latest_schema=latest,
        config=_optional(
            lambda: registry.get_subject_config(subject, context), f"config of {subject}"
        ),
        mode=_optional(lambda: registry.get_subject_mode(subject, context), f"mode of {subject}"),
        suggested_commands=tuple(suggested_commands(subject, context)),
    )


def describe_context(registry: SchemaRegistry, context: str) -> ContextDescription:
    """Describe one context.

    Raises:
        RegistryError: If the context's subjects cannot be listed
    """
    subjects = registry.list_subjects(context)
    return ContextDescription(
        name=context,
        subjects=tuple(subjects),
        config=_optional(lambda: registry.get_global_config(context), f"config of {context}"),
        mode=_optional(lambda: registry.get_global_mode(context), f"mode of {context}"),
    )


def describe_registry(
    registry: SchemaRegistry, url: str, context: str | None
) -> RegistryDescription:
    """Describe the registry; listing subjects doubles as the reachability check."""
    subjects = _optional(lambda: registry.list_subjects(context), "subjects")
    if subjects is None:
        return RegistryDescription(url=url, is_accessible=False)

    contexts = _optional(registry.list_contexts, "contexts")
    return RegistryDescription(
        url=url,
        is_accessible=True,
        info=_optional(registry.get_registry_info, "registry info"),
        subject_count=len(subjects),
        contexts=tuple(contexts) if contexts is not None else None,
        global_config=_optional(lambda: registry.get_global_config(context), "global config"),
        global_mode=_optional(lambda: registry.get_global_mode(context), "global mode"),
    )
