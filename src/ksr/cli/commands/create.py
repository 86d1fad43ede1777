"""Register new schemas."""

from pathlib import Path

import click
from rich.table import Table

from ksr.cli.core import context_option, output_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.output import user_output
from ksr.cli.rendering import render
from ksr.cli.schema_input import check_well_formed, read_schema_content, schema_input_options
from ksr.core.config_store import OutputFormat
from ksr.core.context import KsrContext
from ksr.core.registry.types import SchemaRequest


def _id_table(schema_id: int) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_row(str(schema_id))
    return table


@click.group("create")
def create_group() -> None:
    """Create resources in the Schema Registry.

    \b
    Examples:
      ksr create schema users-value --file user.avsc
      ksr create schema users-value --schema '{"type":"string"}'
      ksr create schema users-value --file user.json --type JSON
    """


@create_group.command("schema")
@click.argument("subject")
@schema_input_options
@context_option
@output_option
@click.pass_obj
def create_schema(
    ctx: KsrContext,
    subject: str,
    schema_file: Path | None,
    schema_text: str | None,
    schema_type: str,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Register a new schema version under SUBJECT.

    The schema is read from --schema, else --file, else standard input.

    \b
    Examples:
      ksr create schema users-value --file user.avsc
      cat user.avsc | ksr create schema users-value
    """
    content = read_schema_content(schema_text, schema_file)
    check_well_formed(content, schema_type)
    context = resolve_context(ctx, context_flag)

    request = SchemaRequest(schema=content, schema_type=schema_type)
    schema_id = Ensure.registry_call(
        lambda: ctx.registry.register_schema(subject, request, context),
        "failed to register schema",
    )

    user_output(f"Schema registered successfully with ID: {schema_id}")
    fmt = output_format or ctx.global_config.output
    render({"id": schema_id}, fmt, lambda: _id_table(schema_id))
