"""Describe the registry, a context, or a subject."""

import json
from typing import Any

import click
from rich.table import Table

from ksr.cli.core import context_option, output_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.rendering import render
from ksr.core.config_store import OutputFormat
from ksr.core.context import KsrContext
from ksr.core.describe import describe_context, describe_registry, describe_subject


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, list):
        return "\n".join(_display(item) for item in value)
    return str(value)


def description_table(data: dict[str, Any]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("KEY", no_wrap=True)
    table.add_column("VALUE", overflow="fold")
    for key, value in data.items():
        table.add_row(key, _display(value))
    return table


@click.command("describe")
@click.argument("subject", required=False)
@context_option
@output_option
@click.pass_obj
def describe_cmd(
    ctx: KsrContext,
    subject: str | None,
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Describe the Schema Registry, a context, or SUBJECT.

    Without arguments the registry itself is described. With --context
    alone, that context is described.

    \b
    Examples:
      ksr describe
      ksr describe --context .production
      ksr describe users-value --context .dev
    """
    if subject is not None:
        context = resolve_context(ctx, context_flag)
        description = Ensure.registry_call(
            lambda: describe_subject(ctx.registry, subject, context),
            f"failed to describe subject {subject}",
        )
        data = description.to_dict()
    elif context_flag:
        context_description = Ensure.registry_call(
            lambda: describe_context(ctx.registry, context_flag),
            f"failed to get subjects for context {context_flag}",
        )
        data = context_description.to_dict()
    else:
        registry_description = describe_registry(
            ctx.registry, ctx.global_config.registry_url, ctx.default_context
        )
        data = registry_description.to_dict()

    render(data, output_format or ctx.global_config.output, lambda: description_table(data))
