import logging
import os

import click

from ksr.cli.commands.check import check_group
from ksr.cli.commands.config import config_group
from ksr.cli.commands.create import create_group
from ksr.cli.commands.delete import delete_group
from ksr.cli.commands.describe import describe_cmd
from ksr.cli.commands.export import export_group
from ksr.cli.commands.get import get_group
from ksr.cli.commands.import_cmd import import_group
from ksr.cli.commands.set import set_group
from ksr.core.context import ConnectionOverrides, create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_LOG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"


def _configure_logging(verbose: bool) -> None:
    # Enable debug logging with --verbose or the KSR_DEBUG environment variable
    if verbose or os.getenv("KSR_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format=DEBUG_LOG_FORMAT)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="ksr")
@click.option("--registry-url", default=None, help="Schema Registry URL (overrides config)")
@click.option("--user", "username", default=None, help="Username for basic auth")
@click.option("--pass", "password", default=None, help="Password for basic auth")
@click.option("--api-key", default=None, help="API key for authentication")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    registry_url: str | None,
    username: str | None,
    password: str | None,
    api_key: str | None,
    insecure: bool,
    verbose: bool,
) -> None:
    """Manage a Kafka Schema Registry and move its contents between registries."""
    _configure_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(
            ConnectionOverrides(
                registry_url=registry_url,
                username=username,
                password=password,
                api_key=api_key,
                insecure=insecure,
            )
        )


cli.add_command(check_group)
cli.add_command(config_group)
cli.add_command(create_group)
cli.add_command(delete_group)
cli.add_command(describe_cmd)
cli.add_command(export_group)
cli.add_command(get_group)
cli.add_command(import_group)
cli.add_command(set_group)


def main() -> None:
    """CLI entry point used by the `ksr` console script."""
    cli()
