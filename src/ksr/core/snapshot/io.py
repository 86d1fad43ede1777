"""Read and write snapshot files.

A snapshot is written to a single file, rendered for standard output, or
split into one `<subject>.json` file per subject inside a directory. Each
per-subject file is a complete snapshot that can be imported on its own.
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import yaml
from pydantic import ValidationError

from ksr.core.errors import SnapshotReadError, SnapshotWriteError
from ksr.core.registry.abc import SchemaRegistry
from ksr.core.snapshot.builder import ExportOptions, build_snapshot
from ksr.core.snapshot.document import (
    SnapshotDocument,
    snapshot_from_document,
    snapshot_to_document,
)
from ksr.core.snapshot.types import Snapshot
from ksr.core.time.abc import Time

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"

SnapshotFormat = Literal["json", "yaml"]


def dump_snapshot(snapshot: Snapshot, output_format: SnapshotFormat = "json") -> str:
    """Serialize a snapshot as indented JSON (or YAML for display)."""
    data = snapshot_to_document(snapshot).to_json_dict()
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def parse_snapshot(text: str, source: Path) -> Snapshot:
    """Parse snapshot JSON text.

    Raises:
        SnapshotReadError: If the text is not JSON or does not match the format
    """
    try:
        document = SnapshotDocument.model_validate_json(text)
    except ValidationError as e:
        raise SnapshotReadError(source, f"invalid snapshot: {e}") from e
    return snapshot_from_document(document)


def read_snapshot(path: Path) -> Snapshot:
    """Read one snapshot file.

    Raises:
        SnapshotReadError: If the file cannot be opened or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SnapshotReadError(path, str(e)) from e
    return parse_snapshot(text, path)


def write_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write a snapshot to a file, replacing any existing content.

    Raises:
        SnapshotWriteError: If the file cannot be created
    """
    try:
        path.write_text(dump_snapshot(snapshot), encoding="utf-8")
    except OSError as e:
        raise SnapshotWriteError(path, str(e)) from e


def subject_file_path(directory: Path, subject: str) -> Path:
    """Path of the per-subject snapshot file for a subject."""
    return directory / f"{subject}{SNAPSHOT_SUFFIX}"


def ensure_directory(directory: Path) -> None:
    """Create an export directory (and parents) if missing.

    Raises:
        SnapshotWriteError: If the directory cannot be created
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SnapshotWriteError(directory, f"failed to create export directory: {e}") from e


def write_snapshot_directory(snapshots: list[Snapshot], directory: Path) -> list[Path]:
    """Write single-subject snapshots as `<subject>.json` files in a directory.

    Raises:
        SnapshotWriteError: If the directory or a file cannot be created
        ValueError: If a snapshot does not hold exactly one subject
    """
    ensure_directory(directory)

    written: list[Path] = []
    for snapshot in snapshots:
        if len(snapshot.subjects) != 1:
            raise ValueError(
                f"directory snapshots hold one subject each, got {len(snapshot.subjects)}"
            )
        path = subject_file_path(directory, snapshot.subjects[0].name)
        write_snapshot(snapshot, path)
        written.append(path)
    return written


def export_to_directory(
    registry: SchemaRegistry,
    time: Time,
    subjects: list[str],
    options: ExportOptions,
    directory: Path,
    on_written: Callable[[str, Path], None] | None = None,
) -> list[Path]:
    """Export each subject to its own snapshot file in a directory.

    The builder runs once per subject, so every file carries its own metadata
    (and global config, when requested) and imports standalone. Files already
    written stay on disk if a later subject fails.

    Args:
        registry: Source registry
        time: Clock for exported_at timestamps
        subjects: Subject names to export
        options: Export parameters
        directory: Target directory, created if missing
        on_written: Called with (subject, path) after each file is written

    Returns:
        Paths written, in subject order

    Raises:
        ExportError: If any registry read fails
        SnapshotWriteError: If the directory or a file cannot be created
    """
    ensure_directory(directory)

    written: list[Path] = []
    for subject in subjects:
        snapshot = build_snapshot(registry, time, [subject], options)
        path = subject_file_path(directory, subject)
        write_snapshot(snapshot, path)
        logger.debug("Wrote snapshot for subject %s to %s", subject, path)
        written.append(path)
        if on_written is not None:
            on_written(subject, path)
    return written


def list_snapshot_files(directory: Path) -> list[Path]:
    """List snapshot files in a directory in lexical order.

    Only regular files ending in .json match; everything else is ignored.

    Raises:
        SnapshotReadError: If the directory cannot be listed
    """
    if not directory.is_dir():
        raise SnapshotReadError(directory, "not a directory")
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise SnapshotReadError(directory, str(e)) from e
    return sorted(
        (entry for entry in entries if entry.suffix == SNAPSHOT_SUFFIX and entry.is_file()),
        key=lambda entry: entry.name,
    )
