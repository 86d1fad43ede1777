"""Output utilities for CLI commands with clear intent.

user_output() is for humans and goes to stderr; machine_output() is for data
(exported snapshots, JSON/YAML results) and goes to stdout so it can be piped.
"""

import click


def user_output(message: str = "") -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, err=True)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Write machine-readable data to stdout."""
    click.echo(message, nl=nl)
