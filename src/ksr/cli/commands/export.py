"""Export subjects and schemas to snapshot files."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ksr.cli.core import context_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.output import machine_output, user_output
from ksr.core.context import KsrContext
from ksr.core.errors import KsrError
from ksr.core.snapshot.builder import ExportOptions, build_snapshot, list_export_subjects
from ksr.core.snapshot.io import dump_snapshot, export_to_directory, write_snapshot

logger = logging.getLogger(__name__)


def export_options[F: Callable[..., Any]](fn: F) -> F:
    """Options shared by `export subjects` and `export subject`."""
    decorators = [
        click.option(
            "-f",
            "--file",
            "file_path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Output file (default: stdout)",
        ),
        click.option(
            "--directory",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Export each subject to a separate file in this directory",
        ),
        click.option("--all-versions", is_flag=True, help="Export all versions of schemas"),
        click.option(
            "--include-config/--no-include-config",
            default=True,
            show_default=True,
            help="Include global and subject configuration in the export",
        ),
        context_option,
        click.option(
            "-o",
            "--output",
            "output_format",
            type=click.Choice(["json", "yaml"]),
            default="json",
            show_default=True,
            help="Format when writing to stdout",
        ),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def _run_export(
    ctx: KsrContext,
    subjects: list[str] | None,
    file_path: Path | None,
    directory: Path | None,
    all_versions: bool,
    include_config: bool,
    context_flag: str | None,
    output_format: str,
) -> None:
    Ensure.at_most_one("--file and --directory cannot be used together", file_path, directory)

    options = ExportOptions(
        all_versions=all_versions,
        include_config=include_config,
        context=resolve_context(ctx, context_flag),
        cli_version=ctx.cli_version,
        registry_url=ctx.global_config.registry_url,
    )
    logger.debug("Export options: %s", options)

    try:
        if subjects is None:
            subjects = list_export_subjects(ctx.registry, options.context)

        if directory is not None:
            export_to_directory(
                ctx.registry,
                ctx.time,
                subjects,
                options,
                directory,
                on_written=lambda subject, path: user_output(
                    f"Exported subject '{subject}' to {path}"
                ),
            )
            return

        snapshot = build_snapshot(ctx.registry, ctx.time, subjects, options)
        if file_path is not None:
            write_snapshot(snapshot, file_path)
            user_output(f"Exported data to {file_path}")
            return
    except KsrError as e:
        Ensure.fail(str(e))

    machine_output(dump_snapshot(snapshot, "yaml" if output_format == "yaml" else "json"), nl=False)


@click.group("export")
def export_group() -> None:
    """Export subjects and schemas to snapshot files.

    \b
    Examples:
      ksr export subjects -f backup.json
      ksr export subjects --all-versions --directory ./exports
      ksr export subject users-value --no-include-config
    """


@export_group.command("subjects")
@export_options
@click.pass_obj
def export_subjects(
    ctx: KsrContext,
    file_path: Path | None,
    directory: Path | None,
    all_versions: bool,
    include_config: bool,
    context_flag: str | None,
    output_format: str,
) -> None:
    """Export every subject in the context."""
    _run_export(
        ctx, None, file_path, directory, all_versions, include_config, context_flag, output_format
    )


@export_group.command("subject")
@click.argument("subject")
@export_options
@click.pass_obj
def export_subject(
    ctx: KsrContext,
    subject: str,
    file_path: Path | None,
    directory: Path | None,
    all_versions: bool,
    include_config: bool,
    context_flag: str | None,
    output_format: str,
) -> None:
    """Export a single SUBJECT."""
    _run_export(
        ctx,
        [subject],
        file_path,
        directory,
        all_versions,
        include_config,
        context_flag,
        output_format,
    )
