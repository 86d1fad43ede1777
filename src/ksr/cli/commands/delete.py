"""Delete subjects and schema versions."""

import click

from ksr.cli.core import context_option, resolve_context
from ksr.cli.ensure import Ensure
from ksr.cli.output import user_output
from ksr.core.context import KsrContext


@click.group("delete")
def delete_group() -> None:
    """Delete resources from the Schema Registry."""


@delete_group.command("subject")
@click.argument("subject")
@click.option("--permanent", is_flag=True, help="Hard delete instead of soft delete")
@context_option
@click.pass_obj
def delete_subject(
    ctx: KsrContext, subject: str, permanent: bool, context_flag: str | None
) -> None:
    """Delete SUBJECT and all of its versions."""
    context = resolve_context(ctx, context_flag)
    versions = Ensure.registry_call(
        lambda: ctx.registry.delete_subject(subject, context, permanent=permanent),
        "failed to delete subject",
    )
    if versions:
        user_output(f"Deleted subject {subject} (versions: {versions})")
    else:
        user_output(f"Deleted subject {subject}")


@delete_group.command("version")
@click.argument("subject")
@click.option("--version", "version", type=int, required=True, help="Version number to delete")
@click.option("--permanent", is_flag=True, help="Hard delete instead of soft delete")
@context_option
@click.pass_obj
def delete_version(
    ctx: KsrContext, subject: str, version: int, permanent: bool, context_flag: str | None
) -> None:
    """Delete one version of SUBJECT."""
    Ensure.invariant(version > 0, f"invalid version number: {version}")
    context = resolve_context(ctx, context_flag)
    Ensure.registry_call(
        lambda: ctx.registry.delete_subject_version(
            subject, version, context, permanent=permanent
        ),
        "failed to delete version",
    )
    user_output(f"Deleted version {version} of subject {subject}")
