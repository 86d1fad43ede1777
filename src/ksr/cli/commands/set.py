"""Change registry settings."""

import click

from ksr.cli.core import context_option, output_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.rendering import mode_table, render
from ksr.core.config_store import OutputFormat
from ksr.core.context import KsrContext


@click.group("set")
def set_group() -> None:
    """Set registry-wide or subject-level settings."""


@set_group.command("mode")
@click.argument("args", nargs=-1, required=True, metavar="[SUBJECT] MODE")
@context_option
@output_option
@click.pass_obj
def set_mode(
    ctx: KsrContext,
    args: tuple[str, ...],
    context_flag: str | None,
    output_format: OutputFormat | None,
) -> None:
    """Set the global mode, or the mode of SUBJECT.

    MODE must be one of READWRITE, READONLY, IMPORT (uppercase).

    \b
    Examples:
      ksr set mode READONLY
      ksr set mode users-value IMPORT
    """
    Ensure.invariant(len(args) <= 2, "expected [SUBJECT] MODE")
    context = resolve_context(ctx, context_flag)

    if len(args) == 1:
        mode = Ensure.valid_mode(args[0])
        result = Ensure.registry_call(
            lambda: ctx.registry.set_global_mode(mode, context), "failed to set global mode"
        )
    else:
        subject = args[0]
        mode = Ensure.valid_mode(args[1])
        result = Ensure.registry_call(
            lambda: ctx.registry.set_subject_mode(subject, mode, context),
            f"failed to set mode for subject {subject}",
        )

    fmt = output_format or ctx.global_config.output
    render({"mode": result.value}, fmt, lambda: mode_table(result))
