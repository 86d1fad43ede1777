"""Read subjects, schemas, configuration, and modes from the registry."""

import click

from ksr.cli.core import context_option, output_option, parse_version, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.rendering import (
    config_table,
    mode_table,
    print_empty,
    render,
    schemas_table,
    subjects_table,
    versions_table,
)
from ksr.core.config_store import OutputFormat
from ksr.core.context import KsrContext
from ksr.core.registry.types import LATEST


def _output(ctx: KsrContext, output_format: OutputFormat | None) -> OutputFormat:
    return output_format or ctx.global_config.output


@click.group("get")
def get_group() -> None:
    """Get resources from the Schema Registry.

    \b
    Examples:
      ksr get subjects
      ksr get versions users-value
      ksr get schemas users-value --version 2
      ksr get config
      ksr get mode users-value
    """


@get_group.command("subjects")
@context_option
@output_option
@click.pass_obj
def get_subjects(
    ctx: KsrContext, context_flag: str | None, output_format: OutputFormat | None
) -> None:
    """List all subjects."""
    context = resolve_context(ctx, context_flag)
    subjects = Ensure.registry_call(
        lambda: ctx.registry.list_subjects(context), "failed to get subjects"
    )
    fmt = _output(ctx, output_format)
    if not subjects and fmt == "table":
        print_empty("subjects")
        return
    render(subjects, fmt, lambda: subjects_table(subjects))


@get_group.command("versions")
@click.argument("subject")
@context_option
@output_option
@click.pass_obj
def get_versions(
    ctx: KsrContext, subject: str, context_flag: str | None, output_format: OutputFormat | None
) -> None:
    """List the versions registered under SUBJECT."""
    context = resolve_context(ctx, context_flag)
    versions = Ensure.registry_call(
        lambda: ctx.registry.list_versions(subject, context),
        f"failed to get versions for subject {subject}",
    )
    render(versions, _output(ctx, output_format), lambda: versions_table(versions))


@get_group.command("schemas")
@click.argument("subject")
@click.option("-V", "--version", "version", default=None, help="Schema version (default: latest)")
@click.option("--all", "all_versions", is_flag=True, help="Get all versions")
@context_option
@output_option
@click.pass_obj
def get_schemas(
    ctx: KsrContext,
    subject: str,
    version: str | None,
    all_versions: bool,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Show the schema registered under SUBJECT."""
    Ensure.at_most_one("--version and --all cannot be used together", version, all_versions)
    context = resolve_context(ctx, context_flag)

    if all_versions:
        numbers = Ensure.registry_call(
            lambda: ctx.registry.list_versions(subject, context),
            f"failed to get versions for subject {subject}",
        )
        schemas = [
            Ensure.registry_call(
                lambda number=number: ctx.registry.get_schema(subject, number, context),
                f"failed to get schema version {number}",
            )
            for number in numbers
        ]
        data: object = [schema.to_dict() for schema in schemas]
    else:
        selector = parse_version(version) if version is not None else LATEST
        schema = Ensure.registry_call(
            lambda: ctx.registry.get_schema(subject, selector, context), "failed to get schema"
        )
        schemas = [schema]
        data = schema.to_dict()

    render(data, _output(ctx, output_format), lambda: schemas_table(schemas))


@get_group.command("config")
@click.argument("subject", required=False)
@context_option
@output_option
@click.pass_obj
def get_config(
    ctx: KsrContext,
    subject: str | None,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Show the global configuration, or the configuration of SUBJECT."""
    context = resolve_context(ctx, context_flag)
    if subject is None:
        config = Ensure.registry_call(
            lambda: ctx.registry.get_global_config(context), "failed to get global config"
        )
    else:
        subject_config = Ensure.registry_call(
            lambda: ctx.registry.get_subject_config(subject, context),
            f"failed to get config for subject {subject}",
        )
        config = Ensure.not_none(
            subject_config, f"subject {subject} has no subject-level configuration"
        )
    render(config.to_dict(), _output(ctx, output_format), lambda: config_table(config))


@get_group.command("mode")
@click.argument("subject", required=False)
@context_option
@output_option
@click.pass_obj
def get_mode(
    ctx: KsrContext,
    subject: str | None,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Show the global mode, or the mode of SUBJECT."""
    context = resolve_context(ctx, context_flag)
    if subject is None:
        mode = Ensure.registry_call(
            lambda: ctx.registry.get_global_mode(context), "failed to get global mode"
        )
    else:
        subject_mode = Ensure.registry_call(
            lambda: ctx.registry.get_subject_mode(subject, context),
            f"failed to get mode for subject {subject}",
        )
        mode = Ensure.not_none(subject_mode, f"subject {subject} has no subject-level mode")
    render({"mode": mode.value}, _output(ctx, output_format), lambda: mode_table(mode))
