"""Rendering of command results as tables, JSON, or YAML.

Tables are built with rich and printed to stdout alongside JSON/YAML so
every `-o` choice can be piped the same way.
"""

import json
from collections.abc import Callable
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from ksr.cli.output import machine_output, user_output
from ksr.core.config_store import OutputFormat
from ksr.core.registry.types import RegistryConfig, RegistryMode, Schema
from ksr.core.snapshot.types import ImportStatus, ImportSummary

# Above this many results the per-version listing is only shown when errors occurred
DETAILED_RESULTS_LIMIT = 20


def format_structured(data: Any, output_format: OutputFormat) -> str:
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n")
    return json.dumps(data, indent=2, ensure_ascii=False)


def print_table(table: Table) -> None:
    console = Console(width=200)
    console.print(table)


def render(data: Any, output_format: OutputFormat, build_table: Callable[[], Table]) -> None:
    """Print data as structured text, or as the table build_table returns."""
    if output_format == "table":
        print_table(build_table())
        return
    machine_output(format_structured(data, output_format))


def subjects_table(subjects: list[str]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("SUBJECT", no_wrap=True)
    for subject in subjects:
        table.add_row(subject)
    return table


def versions_table(versions: list[int]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("VERSION", justify="right")
    for version in versions:
        table.add_row(str(version))
    return table


def schemas_table(schemas: list[Schema]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("SUBJECT", no_wrap=True)
    table.add_column("VERSION", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("TYPE")
    table.add_column("SCHEMA", overflow="fold")
    for schema in schemas:
        table.add_row(
            schema.subject,
            str(schema.version),
            str(schema.schema_id),
            schema.schema_type or "AVRO",
            schema.schema,
        )
    return table


def config_table(config: RegistryConfig) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("SETTING", no_wrap=True)
    table.add_column("VALUE")
    for key, value in config.to_dict().items():
        table.add_row(key, str(value).lower() if isinstance(value, bool) else str(value))
    return table


def mode_table(mode: RegistryMode) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("MODE")
    table.add_row(mode.value)
    return table


def print_import_summary(summary: ImportSummary) -> None:
    """Print counts, the failed versions, and (when short or failing) every result."""
    machine_output()
    machine_output("Import Summary:")
    machine_output(f"Total: {summary.total}")
    machine_output(f"Created: {summary.created}")
    machine_output(f"Existing: {summary.existing}")
    machine_output(f"Errors: {summary.errors}")
    machine_output(f"Skipped: {summary.skipped}")

    if summary.errors > 0:
        machine_output()
        machine_output("Errors:")
        for result in summary.results:
            if result.status == ImportStatus.ERROR:
                machine_output(f"  {result.subject} v{result.version}: {result.error}")

    if summary.total <= DETAILED_RESULTS_LIMIT or summary.errors > 0:
        machine_output()
        machine_output("Detailed Results:")
        for result in summary.results:
            status = result.status.value.upper()
            if result.schema_id:
                machine_output(
                    f"  [{status}] {result.subject} v{result.version} (ID: {result.schema_id})"
                )
            else:
                machine_output(f"  [{status}] {result.subject} v{result.version}")


def print_empty(what: str) -> None:
    user_output(f"No {what} found")
