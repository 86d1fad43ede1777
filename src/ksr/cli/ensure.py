"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.

Domain-Specific Methods:
- Option validations (mutually exclusive and required sources)
- Mode validations (uppercase READWRITE/READONLY/IMPORT)
- Registry calls whose failure ends the command
"""

from collections.abc import Callable
from typing import NoReturn

import click

from ksr.cli.output import user_output
from ksr.core.registry.types import RegistryError, RegistryMode

VALID_MODES = ", ".join(mode.value for mode in RegistryMode)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def fail(error_message: str) -> NoReturn:
        """Output styled error and exit.

        Raises:
            SystemExit: Always (with exit code 1)
        """
        user_output(click.style("Error: ", fg="red") + error_message)
        raise SystemExit(1)

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            Ensure.fail(error_message)

    @staticmethod
    def not_none[T](value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Returns:
            The value unchanged if not None (with narrowed type T)

        Raises:
            SystemExit: If value is None (with exit code 1)
        """
        if value is None:
            Ensure.fail(error_message)
        return value

    @staticmethod
    def at_most_one(error_message: str, *values: object) -> None:
        """Ensure no more than one of the given option values is set.

        Example:
            >>> Ensure.at_most_one("--file and --directory are exclusive", file, directory)
        """
        if sum(1 for value in values if value) > 1:
            Ensure.fail(error_message)

    @staticmethod
    def valid_mode(value: str) -> RegistryMode:
        """Parse a mode argument, which must be an uppercase mode name.

        Raises:
            SystemExit: If the mode is unknown or not uppercase
        """
        upper = value.upper()
        if upper not in RegistryMode.__members__:
            Ensure.fail(f"invalid mode: {value}. Valid modes are: {VALID_MODES}")
        if upper != value:
            Ensure.fail(
                f"invalid mode: {value}. Mode must be uppercase. Valid modes are: {VALID_MODES}"
            )
        return RegistryMode(upper)

    @staticmethod
    def registry_call[T](call: Callable[[], T], action: str) -> T:
        """Run a registry call, exiting with a styled error if it fails.

        Args:
            call: Zero-argument callable performing the registry operation
            action: Description used as the error prefix, e.g. "failed to get subjects"

        Raises:
            SystemExit: If the call raises RegistryError (with exit code 1)

        Example:
            >>> subjects = Ensure.registry_call(
            ...     lambda: ctx.registry.list_subjects(context), "failed to get subjects"
            ... )
        """
        try:
            return call()
        except RegistryError as e:
            Ensure.fail(f"{action}: {e}")
