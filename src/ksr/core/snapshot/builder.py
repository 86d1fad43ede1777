"""Build snapshots from live registry state.

Export is all-or-nothing: any registry error while capturing a subject aborts
the whole export with ExportError, because a silently incomplete snapshot is
worse than none.
"""

import logging
from dataclasses import dataclass

from ksr.core.errors import ExportError
from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.types import LATEST, RegistryError, Schema
from ksr.core.snapshot.types import (
    ExportedSchemaVersion,
    ExportedSubject,
    Snapshot,
    SnapshotMetadata,
)
from ksr.core.time.abc import Time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportOptions:
    """Parameters for one export invocation.

    Attributes:
        all_versions: Capture every version instead of only the latest
        include_config: Capture subject-level and global configuration
        context: Registry context to read from
        cli_version: Version string recorded in snapshot metadata
        registry_url: Source registry URL recorded in snapshot metadata
    """

    all_versions: bool
    include_config: bool
    context: str | None
    cli_version: str
    registry_url: str | None = None


def _exported_version(schema: Schema) -> ExportedSchemaVersion:
    return ExportedSchemaVersion(
        schema_id=schema.schema_id,
        version=schema.version,
        schema=schema.schema,
        schema_type=schema.schema_type,
        references=schema.references,
    )


def list_export_subjects(registry: SchemaRegistry, context: str | None) -> list[str]:
    """List every subject in a context for a bulk export.

    Raises:
        ExportError: If the registry cannot list subjects
    """
    try:
        return registry.list_subjects(context)
    except RegistryError as e:
        raise ExportError(f"failed to get subjects: {e}") from e


def export_subject(
    registry: SchemaRegistry, subject: str, options: ExportOptions
) -> ExportedSubject:
    """Capture one subject's versions and, optionally, its configuration.

    Raises:
        ExportError: On any registry failure
    """
    config = None
    if options.include_config:
        try:
            config = registry.get_subject_config(subject, options.context)
        except RegistryError as e:
            raise ExportError(f"failed to get config for subject {subject}: {e}") from e

    versions: list[ExportedSchemaVersion] = []
    if options.all_versions:
        try:
            version_numbers = registry.list_versions(subject, options.context)
        except RegistryError as e:
            raise ExportError(f"failed to get versions for subject {subject}: {e}") from e

        for version in version_numbers:
            try:
                schema = registry.get_schema(subject, version, options.context)
            except RegistryError as e:
                raise ExportError(
                    f"failed to get schema version {version} for subject {subject}: {e}"
                ) from e
            versions.append(_exported_version(schema))
    else:
        try:
            schema = registry.get_schema(subject, LATEST, options.context)
        except RegistryError as e:
            raise ExportError(f"failed to get latest schema for subject {subject}: {e}") from e
        versions.append(_exported_version(schema))

    logger.debug("Exported subject %s: versions=%s", subject, [v.version for v in versions])
    return ExportedSubject(name=subject, versions=tuple(versions), config=config)


def build_snapshot(
    registry: SchemaRegistry,
    time: Time,
    subjects: list[str],
    options: ExportOptions,
) -> Snapshot:
    """Assemble a snapshot of the given subjects.

    Subjects appear in the order given; versions in the order the registry
    lists them. The global configuration is fetched once per snapshot when
    include_config is set.

    Args:
        registry: Source registry
        time: Clock for the exported_at timestamp
        subjects: Subject names to capture
        options: Export parameters

    Returns:
        A fully populated Snapshot

    Raises:
        ExportError: If any registry read fails
    """
    metadata = SnapshotMetadata(
        exported_at=time.now().isoformat(timespec="seconds"),
        cli_version=options.cli_version,
        context=options.context,
        registry_url=options.registry_url,
    )

    global_config = None
    if options.include_config:
        try:
            global_config = registry.get_global_config(options.context)
        except RegistryError as e:
            raise ExportError(f"failed to get global config: {e}") from e

    exported: list[ExportedSubject] = []
    for subject in subjects:
        try:
            exported.append(export_subject(registry, subject, options))
        except ExportError as e:
            raise ExportError(f"failed to export subject {subject}: {e}") from e

    return Snapshot(metadata=metadata, subjects=tuple(exported), config=global_config)
