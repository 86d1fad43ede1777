"""Import every snapshot file in a directory.

Files are processed one after another in lexical filename order. A file that
cannot be read or parsed is reported and skipped; the remaining files are
still imported and their results merged into one summary.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ksr.core.errors import SnapshotReadError
from ksr.core.registry.abc import SchemaRegistry
from ksr.core.snapshot.io import list_snapshot_files, read_snapshot
from ksr.core.snapshot.reconcile import ImportOptions, import_snapshot
from ksr.core.snapshot.types import ImportSummary
from ksr.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileFailure:
    """A snapshot file that could not be loaded."""

    path: Path
    error: str


@dataclass(frozen=True)
class BatchImportResult:
    """Merged summary of a directory import plus the files that were skipped."""

    summary: ImportSummary
    failures: tuple[FileFailure, ...] = field(default_factory=tuple)

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0


def import_directory(
    registry: SchemaRegistry,
    directory: Path,
    options: ImportOptions,
    feedback: UserFeedback,
) -> BatchImportResult:
    """Import all `*.json` snapshot files in a directory.

    Args:
        registry: Target registry
        directory: Directory holding snapshot files
        options: Mode bundle applied to every file
        feedback: Destination for progress messages

    Returns:
        The merged summary and any unreadable files

    Raises:
        SnapshotReadError: If the directory cannot be listed or holds no snapshot files
        ImportBlockedError: If the target is READONLY and force is not set
    """
    files = list_snapshot_files(directory)
    if not files:
        raise SnapshotReadError(directory, f"no JSON files found in directory {directory}")

    summary = ImportSummary()
    failures: list[FileFailure] = []
    for path in files:
        feedback.info(f"Processing file: {path.name}")
        try:
            snapshot = read_snapshot(path)
        except SnapshotReadError as e:
            logger.debug("Skipping unreadable snapshot %s: %s", path, e.reason)
            feedback.error(f"Error loading file {path.name}: {e.reason}")
            failures.append(FileFailure(path=path, error=e.reason))
            continue

        file_summary = import_snapshot(registry, snapshot, options, feedback, source=str(path))
        summary = summary.merge(file_summary)

    logger.debug(
        "Directory import of %s finished: files=%d, failures=%d, results=%d",
        directory,
        len(files),
        len(failures),
        summary.total,
    )
    return BatchImportResult(summary=summary, failures=tuple(failures))
