"""Pydantic models for the snapshot file format.

These models validate snapshot files on read and produce the on-disk shape on
write. Field names are the file-format contract:

    {
      "metadata": {"exported_at", "context"?, "registry_url"?, "cli_version"},
      "subjects": [{"name", "versions": [{"id", "version", "schema",
                    "schema_type"?, "references"}], "config"?}],
      "config"?
    }

Domain code works with the frozen dataclasses in ksr.core.snapshot.types;
convert with snapshot_to_document() and snapshot_from_document().
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ksr.core.registry.types import RegistryConfig, SchemaReference
from ksr.core.snapshot.types import (
    ExportedSchemaVersion,
    ExportedSubject,
    Snapshot,
    SnapshotMetadata,
)


class ReferenceDocument(BaseModel):
    """A named reference to another subject/version pair."""

    model_config = ConfigDict(frozen=True)

    name: str
    subject: str
    version: int


class VersionDocument(BaseModel):
    """One exported schema version.

    Attributes:
        id: Schema ID in the source registry
        version: Version number within the subject
        schema_payload: Raw schema text, serialized under the key "schema"
        schema_type: Schema type tag, omitted for AVRO
        references: References to other subject/version pairs
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    version: int = Field(..., ge=1)
    schema_payload: str = Field(..., alias="schema")
    schema_type: str | None = None
    references: list[ReferenceDocument] = Field(default_factory=list)

    @field_validator("schema_payload", mode="before")
    @classmethod
    def validate_schema_payload(cls, v: Any) -> Any:
        """Accept an embedded JSON object/array by re-serializing it compactly."""
        if isinstance(v, (dict, list)):
            return json.dumps(v, separators=(",", ":"))
        return v


class SubjectDocument(BaseModel):
    """One exported subject."""

    model_config = ConfigDict(frozen=True)

    name: str
    versions: list[VersionDocument] = Field(default_factory=list)
    config: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            msg = "subject name cannot be empty"
            raise ValueError(msg)
        return v


class MetadataDocument(BaseModel):
    """Snapshot provenance."""

    model_config = ConfigDict(frozen=True)

    exported_at: str = ""
    context: str | None = None
    registry_url: str | None = None
    cli_version: str = ""


class SnapshotDocument(BaseModel):
    """Complete snapshot file."""

    model_config = ConfigDict(frozen=True)

    metadata: MetadataDocument = Field(default_factory=MetadataDocument)
    subjects: list[SubjectDocument] = Field(default_factory=list)
    config: dict[str, Any] | None = None

    def to_json_dict(self) -> dict[str, Any]:
        """Dump in file-format shape, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _config_to_dict(config: RegistryConfig | None) -> dict[str, Any] | None:
    if config is None:
        return None
    return config.to_dict()


def _config_from_dict(data: dict[str, Any] | None) -> RegistryConfig | None:
    if data is None:
        return None
    return RegistryConfig.from_dict(data)


def snapshot_to_document(snapshot: Snapshot) -> SnapshotDocument:
    return SnapshotDocument(
        metadata=MetadataDocument(
            exported_at=snapshot.metadata.exported_at,
            context=snapshot.metadata.context,
            registry_url=snapshot.metadata.registry_url,
            cli_version=snapshot.metadata.cli_version,
        ),
        subjects=[
            SubjectDocument(
                name=subject.name,
                versions=[
                    VersionDocument(
                        id=version.schema_id,
                        version=version.version,
                        schema_payload=version.schema,
                        schema_type=version.schema_type,
                        references=[
                            ReferenceDocument(name=ref.name, subject=ref.subject, version=ref.version)
                            for ref in version.references
                        ],
                    )
                    for version in subject.versions
                ],
                config=_config_to_dict(subject.config),
            )
            for subject in snapshot.subjects
        ],
        config=_config_to_dict(snapshot.config),
    )


def snapshot_from_document(document: SnapshotDocument) -> Snapshot:
    return Snapshot(
        metadata=SnapshotMetadata(
            exported_at=document.metadata.exported_at,
            cli_version=document.metadata.cli_version,
            context=document.metadata.context or None,
            registry_url=document.metadata.registry_url or None,
        ),
        subjects=tuple(
            ExportedSubject(
                name=subject.name,
                versions=tuple(
                    ExportedSchemaVersion(
                        schema_id=version.id,
                        version=version.version,
                        schema=version.schema_payload,
                        schema_type=version.schema_type or None,
                        references=tuple(
                            SchemaReference(name=ref.name, subject=ref.subject, version=ref.version)
                            for ref in version.references
                        ),
                    )
                    for version in subject.versions
                ),
                config=_config_from_dict(subject.config),
            )
            for subject in document.subjects
        ),
        config=_config_from_dict(document.config),
    )
