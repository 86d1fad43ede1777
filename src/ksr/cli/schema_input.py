"""Options and helpers for commands that read a schema definition from the user."""

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from ksr.cli.ensure import Ensure
from ksr.core.registry.types import (
    JSON_PAYLOAD_SCHEMA_TYPES,
    SCHEMA_TYPE_AVRO,
    SCHEMA_TYPE_JSON,
    SCHEMA_TYPE_PROTOBUF,
)

SCHEMA_TYPES = (SCHEMA_TYPE_AVRO, SCHEMA_TYPE_JSON, SCHEMA_TYPE_PROTOBUF)

NO_SCHEMA_MESSAGE = "no schema provided: use --file, --schema, or pipe schema via stdin"


def schema_input_options[F: Callable[..., Any]](fn: F) -> F:
    """Options shared by `create schema` and `check compatibility`."""
    decorators = [
        click.option(
            "-f",
            "--file",
            "schema_file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Schema file",
        ),
        click.option("--schema", "schema_text", default=None, help="Schema definition inline"),
        click.option(
            "-t",
            "--type",
            "schema_type",
            type=click.Choice(SCHEMA_TYPES, case_sensitive=False),
            default=SCHEMA_TYPE_AVRO,
            show_default=True,
            help="Schema type",
        ),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


def read_schema_content(schema_text: str | None, schema_file: Path | None) -> str:
    """Schema definition from --schema, else --file, else piped stdin.

    Raises:
        SystemExit: If no source holds a schema or the file cannot be read
    """
    if schema_text:
        return schema_text

    if schema_file is not None:
        try:
            content = schema_file.read_text(encoding="utf-8")
        except OSError as e:
            Ensure.fail(f"failed to read schema file: {e}")
        Ensure.invariant(bool(content.strip()), f"schema file {schema_file} is empty")
        return content

    if sys.stdin.isatty():
        Ensure.fail(NO_SCHEMA_MESSAGE)
    try:
        content = sys.stdin.read()
    except OSError as e:
        Ensure.fail(f"failed to read stdin: {e}")
    Ensure.invariant(bool(content.strip()), NO_SCHEMA_MESSAGE)
    return content


def check_well_formed(content: str, schema_type: str) -> None:
    """Fail early when an AVRO or JSON schema is not valid JSON.

    PROTOBUF definitions are left for the registry to judge.
    """
    if schema_type not in JSON_PAYLOAD_SCHEMA_TYPES:
        return
    try:
        json.loads(content)
    except ValueError as e:
        Ensure.fail(f"invalid schema JSON: {e}")
