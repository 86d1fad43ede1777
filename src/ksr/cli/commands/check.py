"""Test candidate schemas against what the registry already holds."""

from pathlib import Path

import click

from ksr.cli.core import context_option, output_option, parse_version, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.output import machine_output, user_output
from ksr.cli.rendering import format_structured
from ksr.cli.schema_input import check_well_formed, read_schema_content, schema_input_options
from ksr.core.config_store import OutputFormat
from ksr.core.context import KsrContext
from ksr.core.registry.types import LATEST, CompatibilityResult, SchemaRequest


def _verdict_lines(subject: str, result: CompatibilityResult) -> list[str]:
    if result.is_compatible:
        return [f"Schema is compatible with subject '{subject}'"]
    lines = [f"Schema is NOT compatible with subject '{subject}'"]
    if result.messages:
        lines.append("Compatibility issues:")
        lines.extend(f"  • {message}" for message in result.messages)
    return lines


@click.group("check")
def check_group() -> None:
    """Check schemas against the Schema Registry.

    \b
    Examples:
      ksr check compatibility users-value --file user.avsc
      ksr check compatibility users-value --file user.avsc --version 2
    """


@check_group.command("compatibility")
@click.argument("subject")
@schema_input_options
@click.option(
    "-V", "--version", "version", default=None, help="Version to check against (default: latest)"
)
@context_option
@output_option
@click.pass_obj
def check_compatibility(
    ctx: KsrContext,
    subject: str,
    schema_file: Path | None,
    schema_text: str | None,
    schema_type: str,
    version: str | None,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Check whether a schema is compatible with SUBJECT.

    The verdict never changes the exit status; only failures to run the
    check do. With -o json or yaml the verdict goes to stderr and the
    result document to stdout.
    """
    selector = parse_version(version) if version is not None else LATEST
    content = read_schema_content(schema_text, schema_file)
    check_well_formed(content, schema_type)
    context = resolve_context(ctx, context_flag)

    request = SchemaRequest(schema=content, schema_type=schema_type)
    result = Ensure.registry_call(
        lambda: ctx.registry.check_compatibility(subject, request, selector, context),
        "failed to check compatibility",
    )

    fmt = output_format or ctx.global_config.output
    if fmt == "table":
        for line in _verdict_lines(subject, result):
            machine_output(line)
        return

    for line in _verdict_lines(subject, result):
        user_output(line)
    machine_output(format_structured(result.to_dict(), fmt))
