"""Errors raised by the snapshot export/import engine.

These are the fatal tier: each aborts the whole invocation. Per-item import
failures are never raised; they are recorded in the ImportSummary instead.
"""

from pathlib import Path


class KsrError(Exception):
    """Base exception for ksr operations."""


class ExportError(KsrError):
    """A registry read failed while building a snapshot."""


class ImportBlockedError(KsrError):
    """The target registry refuses writes and --force was not given."""


class SnapshotReadError(KsrError):
    """A snapshot file could not be opened or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read snapshot {path}: {reason}")


class SnapshotWriteError(KsrError):
    """A snapshot file or directory could not be created."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to write snapshot {path}: {reason}")
