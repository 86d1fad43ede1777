"""Replay a snapshot against a target registry.

Each schema version in the snapshot yields exactly one ImportResult, in
snapshot order:

- dry run            -> skipped (no registry calls at all)
- skip_existing and the target already has that version number
                     -> existing, carrying the target's schema ID
- registration OK    -> created, carrying the assigned schema ID
- anything else      -> error, carrying the error text

Per-version failures never abort the run. Configuration is imported before
versions; a configuration failure is a warning and never appears in the
summary. The only fatal condition is a READONLY target without force.
"""

import json
import logging
from dataclasses import dataclass

from ksr.core.errors import ImportBlockedError
from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.types import (
    JSON_PAYLOAD_SCHEMA_TYPES,
    SCHEMA_TYPE_AVRO,
    RegistryConfig,
    RegistryError,
    RegistryMode,
    SchemaRequest,
)
from ksr.core.snapshot.types import (
    ExportedSchemaVersion,
    ExportedSubject,
    ImportResult,
    ImportStatus,
    ImportSummary,
    Snapshot,
)
from ksr.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportOptions:
    """Mode bundle for one import invocation.

    Attributes:
        dry_run: Report every version as skipped without touching the target
        skip_existing: Report versions the target already has as existing
        force: Import even when the target registry is READONLY
        import_context: Explicit target context, overriding the snapshot's
        default_context: Ambient context used when nothing else names one
    """

    dry_run: bool = False
    skip_existing: bool = False
    force: bool = False
    import_context: str | None = None
    default_context: str | None = None


def resolve_import_context(snapshot: Snapshot, options: ImportOptions) -> str | None:
    """Target context: explicit override, then snapshot metadata, then the ambient default."""
    if options.import_context:
        return options.import_context
    if snapshot.metadata.context:
        return snapshot.metadata.context
    return options.default_context


def payload_problem(version: ExportedSchemaVersion) -> str | None:
    """Return why a payload cannot be registered, or None if it looks well-formed.

    Only AVRO and JSON payloads are checked, and only for JSON syntax.
    """
    if (version.schema_type or SCHEMA_TYPE_AVRO) not in JSON_PAYLOAD_SCHEMA_TYPES:
        return None
    try:
        json.loads(version.schema)
    except ValueError as e:
        return f"schema payload is not well-formed JSON: {e}"
    return None


def _read_target_mode(registry: SchemaRegistry, context: str | None) -> RegistryMode | None:
    try:
        return registry.get_global_mode(context)
    except RegistryError as e:
        # Older registries have no /mode endpoint; assume READWRITE
        logger.debug("Could not read target mode (context=%s): %s", context, e)
        return None


def _import_global_config(
    registry: SchemaRegistry,
    config: RegistryConfig,
    context: str | None,
    feedback: UserFeedback,
) -> None:
    feedback.info("Importing global config...")
    try:
        registry.set_global_config(config, context)
    except RegistryError as e:
        logger.warning("Failed to import global config: %s", e)
        feedback.warning(f"Warning: failed to import global config: {e}")
        return
    feedback.success("Global config imported successfully")


def _import_subject_config(
    registry: SchemaRegistry,
    subject: str,
    config: RegistryConfig,
    context: str | None,
    feedback: UserFeedback,
) -> None:
    feedback.info(f"Importing config for subject {subject}...")
    try:
        registry.set_subject_config(subject, config, context)
    except RegistryError as e:
        logger.warning("Failed to import config for subject %s: %s", subject, e)
        feedback.warning(f"Warning: failed to import config for subject {subject}: {e}")
        return
    feedback.success(f"Config for subject {subject} imported successfully")


def import_version(
    registry: SchemaRegistry,
    subject: str,
    version: ExportedSchemaVersion,
    context: str | None,
    *,
    skip_existing: bool,
    preserve_ids: bool,
) -> ImportResult:
    """Import one schema version and report what happened.

    Never raises for registry failures; they become error results.

    Args:
        registry: Target registry
        subject: Subject to register under
        version: Captured schema version
        context: Target context
        skip_existing: Look up the version number first and report it as existing
        preserve_ids: Send the captured schema ID and version (target in IMPORT mode)
    """
    if skip_existing:
        try:
            existing = registry.get_schema(subject, version.version, context)
        except RegistryError as e:
            if not e.is_not_found:
                return ImportResult(
                    subject=subject,
                    version=version.version,
                    status=ImportStatus.ERROR,
                    error=f"failed to check existing schema: {e}",
                )
        else:
            logger.debug(
                "Subject %s v%d already exists (id=%d)", subject, version.version, existing.schema_id
            )
            return ImportResult(
                subject=subject,
                version=version.version,
                status=ImportStatus.EXISTING,
                schema_id=existing.schema_id,
            )

    problem = payload_problem(version)
    if problem is not None:
        return ImportResult(
            subject=subject, version=version.version, status=ImportStatus.ERROR, error=problem
        )

    request = SchemaRequest(
        schema=version.schema,
        schema_type=version.schema_type,
        references=version.references,
        schema_id=version.schema_id if preserve_ids else None,
        version=version.version if preserve_ids else None,
    )
    try:
        schema_id = registry.register_schema(subject, request, context)
    except RegistryError as e:
        logger.debug("Registering %s v%d failed: %s", subject, version.version, e)
        return ImportResult(
            subject=subject, version=version.version, status=ImportStatus.ERROR, error=str(e)
        )

    logger.debug("Registered %s v%d as id=%d", subject, version.version, schema_id)
    return ImportResult(
        subject=subject, version=version.version, status=ImportStatus.CREATED, schema_id=schema_id
    )


def _skipped_results(subject: ExportedSubject) -> list[ImportResult]:
    return [
        ImportResult(subject=subject.name, version=version.version, status=ImportStatus.SKIPPED)
        for version in subject.versions
    ]


def import_snapshot(
    registry: SchemaRegistry,
    snapshot: Snapshot,
    options: ImportOptions,
    feedback: UserFeedback,
    source: str,
) -> ImportSummary:
    """Replay a snapshot against the target registry.

    Args:
        registry: Target registry
        snapshot: Snapshot to import
        options: Mode bundle
        feedback: Destination for progress messages and warnings
        source: Where the snapshot came from, for messages

    Returns:
        Summary with one result per (subject, version) in snapshot order

    Raises:
        ImportBlockedError: If the target is READONLY and force is not set
    """
    context = resolve_import_context(snapshot, options)
    logger.debug(
        "Importing %s: subjects=%d, context=%s, options=%s",
        source,
        len(snapshot.subjects),
        context,
        options,
    )

    if options.dry_run:
        feedback.info(f"DRY RUN: Would import {len(snapshot.subjects)} subjects from {source}")
        results: list[ImportResult] = []
        for subject in snapshot.subjects:
            results.extend(_skipped_results(subject))
        return ImportSummary(results=tuple(results))

    target_mode = _read_target_mode(registry, context)
    if target_mode == RegistryMode.READONLY and not options.force:
        raise ImportBlockedError(
            "target registry is in READONLY mode - "
            "use --force to attempt the import anyway"
        )
    preserve_ids = target_mode == RegistryMode.IMPORT

    if snapshot.config is not None:
        _import_global_config(registry, snapshot.config, context, feedback)

    results = []
    for subject in snapshot.subjects:
        if subject.config is not None:
            _import_subject_config(registry, subject.name, subject.config, context, feedback)
        for version in subject.versions:
            results.append(
                import_version(
                    registry,
                    subject.name,
                    version,
                    context,
                    skip_existing=options.skip_existing,
                    preserve_ids=preserve_ids,
                )
            )

    return ImportSummary(results=tuple(results))
