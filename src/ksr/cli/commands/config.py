"""Manage the ksr configuration file."""

import click
from rich.table import Table

from ksr.cli.core import output_option
from ksr.cli.ensure import Ensure
from ksr.cli.output import machine_output, user_output
from ksr.cli.rendering import format_structured, print_table
from ksr.core.config_store import CONFIG_KEYS, ConfigStore, GlobalConfig, OutputFormat
from ksr.core.context import KsrContext


def _file_config(store: ConfigStore) -> GlobalConfig:
    """Config as stored on disk, without root flag overrides."""
    if not store.exists():
        return GlobalConfig()
    try:
        return store.load()
    except ValueError as e:
        Ensure.fail(str(e))


@click.group("config")
def config_group() -> None:
    """Manage CLI configuration.

    Configuration is stored in ~/.ksr/config.toml.

    \b
    Available keys:
      registry-url    Schema Registry URL
      username        Username for basic auth
      password        Password for basic auth
      api-key         API key for authentication
      output          Default output format (table, json, yaml)
      timeout         Request timeout in seconds (e.g. 30 or 30s)
      insecure        Skip TLS verification (true/false)
      context         Default Schema Registry context

    \b
    Examples:
      ksr config set registry-url http://localhost:8081
      ksr config validate
      ksr config reset
    """


@config_group.command("list")
@output_option
@click.pass_obj
def config_list(ctx: KsrContext, output_format: OutputFormat | None) -> None:
    """Print a list of configuration keys and values."""
    items = _file_config(ctx.config_store).items()
    fmt = output_format or "table"
    if fmt != "table":
        machine_output(format_structured(dict(items), fmt))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("KEY", no_wrap=True)
    table.add_column("VALUE")
    for key, value in items:
        table.add_row(key, value)
    print_table(table)


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: KsrContext, key: str) -> None:
    """Print the value of a given configuration KEY."""
    Ensure.invariant(key in CONFIG_KEYS, f"invalid configuration key: {key}")
    value = _file_config(ctx.config_store).get_value(key)
    if value is None:
        machine_output(f"{key} is not set")
        return
    machine_output(f"{key} = {value}")


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: KsrContext, key: str, value: str) -> None:
    """Set configuration KEY to VALUE and save the file."""
    Ensure.invariant(key in CONFIG_KEYS, f"invalid configuration key: {key}")
    current = _file_config(ctx.config_store)
    try:
        updated = current.with_value(key, value)
    except ValueError as e:
        Ensure.fail(str(e))

    try:
        ctx.config_store.save(updated)
    except OSError as e:
        Ensure.fail(f"failed to save configuration: {e}")
    user_output(f"Configuration updated: {key} = {value}")


@config_group.command("init")
@click.pass_obj
def config_init(ctx: KsrContext) -> None:
    """Create a configuration file with default values."""
    store = ctx.config_store
    if store.exists():
        user_output(f"Configuration file already exists: {store.path()}")
        return

    try:
        store.save(GlobalConfig())
    except OSError as e:
        Ensure.fail(f"failed to create configuration file: {e}")

    user_output(f"Configuration file created: {store.path()}")
    user_output("\nYou can now set your registry URL:")
    user_output("  ksr config set registry-url http://your-schema-registry:8081")


def _authentication(config: GlobalConfig) -> str:
    if config.api_key:
        return "API Key configured"
    if config.username and config.password:
        return "Basic Auth configured"
    return "None configured"


@config_group.command("validate")
@click.pass_obj
def config_validate(ctx: KsrContext) -> None:
    """Check the effective configuration and test connectivity to the registry."""
    config = ctx.global_config
    Ensure.invariant(bool(config.registry_url), "registry-url is not configured")

    machine_output(f"Registry URL: {config.registry_url}")
    machine_output(f"Authentication: {_authentication(config)}")

    user_output("\nTesting connectivity...")
    subjects = Ensure.registry_call(
        lambda: ctx.registry.list_subjects(ctx.default_context), "connectivity check failed"
    )
    machine_output(f"Connectivity: OK ({len(subjects)} subjects)")


@config_group.command("reset")
@click.pass_obj
def config_reset(ctx: KsrContext) -> None:
    """Reset the configuration file to defaults, removing all custom settings."""
    try:
        ctx.config_store.reset()
    except OSError as e:
        Ensure.fail(f"failed to reset configuration: {e}")
    user_output("Configuration reset to defaults")
