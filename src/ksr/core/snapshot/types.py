"""Type definitions for snapshots and import results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ksr.core.registry.types import RegistryConfig, SchemaReference


@dataclass(frozen=True)
class SnapshotMetadata:
    """Provenance attached once to every snapshot."""

    exported_at: str  # RFC3339
    cli_version: str
    context: str | None = None
    registry_url: str | None = None


@dataclass(frozen=True)
class ExportedSchemaVersion:
    """One schema version captured from a subject.

    `schema_id` is advisory: a target registry assigns its own IDs unless it
    is in IMPORT mode.
    """

    schema_id: int
    version: int
    schema: str
    schema_type: str | None = None
    references: tuple[SchemaReference, ...] = ()


@dataclass(frozen=True)
class ExportedSubject:
    """A subject and the versions captured from it, oldest first by convention."""

    name: str
    versions: tuple[ExportedSchemaVersion, ...]
    config: RegistryConfig | None = None


@dataclass(frozen=True)
class Snapshot:
    """A portable slice of registry state.

    Subject names are unique because the registry enforces it; the snapshot
    does not deduplicate.
    """

    metadata: SnapshotMetadata
    subjects: tuple[ExportedSubject, ...]
    config: RegistryConfig | None = None

    @property
    def version_count(self) -> int:
        return sum(len(subject.versions) for subject in self.subjects)


class ImportStatus(str, Enum):
    """Outcome of importing one (subject, version) pair."""

    CREATED = "created"
    EXISTING = "existing"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ImportResult:
    """Result of one (subject, version) import attempt."""

    subject: str
    version: int
    status: ImportStatus
    schema_id: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "subject": self.subject,
            "version": self.version,
            "status": self.status.value,
        }
        if self.schema_id is not None:
            data["schema_id"] = self.schema_id
        if self.error:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class ImportSummary:
    """Aggregate of import results.

    Counts are derived from `results` on every access, so they cannot drift
    from the result list.
    """

    results: tuple[ImportResult, ...] = field(default_factory=tuple)

    def _count(self, status: ImportStatus) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def created(self) -> int:
        return self._count(ImportStatus.CREATED)

    @property
    def existing(self) -> int:
        return self._count(ImportStatus.EXISTING)

    @property
    def errors(self) -> int:
        return self._count(ImportStatus.ERROR)

    @property
    def skipped(self) -> int:
        return self._count(ImportStatus.SKIPPED)

    def merge(self, other: "ImportSummary") -> "ImportSummary":
        """Combine two summaries: counts add, result lists concatenate."""
        return ImportSummary(results=self.results + other.results)

    def counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "created": self.created,
            "existing": self.existing,
            "errors": self.errors,
            "skipped": self.skipped,
        }

    def to_dict(self) -> dict[str, Any]:
        return {**self.counts(), "results": [result.to_dict() for result in self.results]}
