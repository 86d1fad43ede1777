"""Helpers shared by CLI commands."""

import click

from ksr.cli.ensure import Ensure
from ksr.core.config_store import OUTPUT_FORMATS
from ksr.core.context import KsrContext
from ksr.core.registry.types import LATEST, VersionSelector

context_option = click.option(
    "--context",
    "context_flag",
    default=None,
    help="Schema Registry context (defaults to the configured context)",
)

output_option = click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="Output format (defaults to the configured output)",
)


def resolve_context(ctx: KsrContext, context_flag: str | None) -> str | None:
    """Registry context for a command: the --context flag, else the configured default."""
    if context_flag:
        return context_flag
    return ctx.default_context


def parse_version(value: str) -> VersionSelector:
    """Parse a --version value: a positive number or "latest"."""
    if value == LATEST:
        return LATEST
    Ensure.invariant(
        value.isdigit() and int(value) > 0,
        f"invalid version: {value} (must be a positive number or 'latest')",
    )
    return int(value)
