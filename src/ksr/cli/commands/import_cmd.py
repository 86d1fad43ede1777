"""Import snapshot files into the Schema Registry."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ksr.cli.core import context_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.rendering import print_import_summary
from ksr.core.context import KsrContext
from ksr.core.errors import KsrError
from ksr.core.snapshot.batch import import_directory
from ksr.core.snapshot.io import read_snapshot
from ksr.core.snapshot.reconcile import ImportOptions, import_snapshot
from ksr.core.snapshot.types import ImportSummary

logger = logging.getLogger(__name__)


def import_options[F: Callable[..., Any]](fn: F) -> F:
    """Options shared by `import subjects` and `import subject`."""
    decorators = [
        click.option(
            "-f",
            "--file",
            "file_path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Snapshot file to import",
        ),
        click.option("--dry-run", is_flag=True, help="Preview import without making changes"),
        click.option(
            "--skip-existing",
            is_flag=True,
            help="Report versions the target already has instead of registering them",
        ),
        click.option(
            "--force", is_flag=True, help="Import even if the target registry is READONLY"
        ),
        click.option(
            "--import-context",
            default=None,
            help="Target context (default: the context recorded in the snapshot)",
        ),
        context_option,
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


directory_option = click.option(
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Import every *.json snapshot file in this directory",
)


def _import_options(
    ctx: KsrContext,
    dry_run: bool,
    skip_existing: bool,
    force: bool,
    import_context: str | None,
    context_flag: str | None,
) -> ImportOptions:
    options = ImportOptions(
        dry_run=dry_run,
        skip_existing=skip_existing,
        force=force,
        import_context=import_context or None,
        default_context=resolve_context(ctx, context_flag),
    )
    logger.debug("Import options: %s", options)
    return options


def _finish(summary: ImportSummary, unreadable_files: int, dry_run: bool) -> None:
    """Print the summary and exit non-zero when anything failed."""
    print_import_summary(summary)

    problems: list[str] = []
    if summary.errors > 0 and not dry_run:
        problems.append(f"{summary.errors} schema version(s) failed to import")
    if unreadable_files > 0:
        problems.append(f"{unreadable_files} file(s) could not be read")
    if problems:
        Ensure.fail("; ".join(problems))


def _import_file(ctx: KsrContext, file_path: Path, options: ImportOptions) -> None:
    try:
        snapshot = read_snapshot(file_path)
        summary = import_snapshot(ctx.registry, snapshot, options, ctx.feedback, str(file_path))
    except KsrError as e:
        Ensure.fail(str(e))
    _finish(summary, 0, options.dry_run)


@click.group("import")
def import_group() -> None:
    """Import schemas and subjects from snapshot files.

    \b
    Examples:
      ksr import subjects -f backup.json
      ksr import subjects --directory ./exports
      ksr import subject -f users-value.json --skip-existing
      ksr import subjects -f backup.json --dry-run
    """


@import_group.command("subjects")
@import_options
@directory_option
@click.pass_obj
def import_subjects(
    ctx: KsrContext,
    file_path: Path | None,
    dry_run: bool,
    skip_existing: bool,
    force: bool,
    import_context: str | None,
    context_flag: str | None,
    directory: Path | None,
) -> None:
    """Import all subjects from a snapshot file or directory."""
    Ensure.at_most_one("--file and --directory cannot be used together", file_path, directory)
    Ensure.invariant(
        file_path is not None or directory is not None,
        "either --file or --directory must be specified",
    )
    options = _import_options(ctx, dry_run, skip_existing, force, import_context, context_flag)

    if directory is None:
        _import_file(ctx, Ensure.not_none(file_path, "--file must be specified"), options)
        return

    try:
        batch = import_directory(ctx.registry, directory, options, ctx.feedback)
    except KsrError as e:
        Ensure.fail(str(e))
    _finish(batch.summary, len(batch.failures), options.dry_run)


@import_group.command("subject")
@import_options
@directory_option
@click.pass_obj
def import_subject(
    ctx: KsrContext,
    file_path: Path | None,
    dry_run: bool,
    skip_existing: bool,
    force: bool,
    import_context: str | None,
    context_flag: str | None,
    directory: Path | None,
) -> None:
    """Import a single subject from a snapshot file."""
    Ensure.invariant(
        directory is None,
        "--directory is not supported by `import subject`; use `ksr import subjects --directory`",
    )
    options = _import_options(ctx, dry_run, skip_existing, force, import_context, context_flag)
    _import_file(ctx, Ensure.not_none(file_path, "--file must be specified"), options)
