"""User-facing diagnostic output."""

from abc import ABC, abstractmethod

import click

from ksr.cli.output import user_output


class UserFeedback(ABC):
    """Provides user-facing diagnostic output.

    Engine code reports progress through ctx.feedback instead of printing,
    so tests can capture messages and commands can route them to stderr.

    Usage:
        feedback.info("Importing global config...")
        feedback.success("Global config imported successfully")
        feedback.warning("Warning: failed to import global config: ...")
        feedback.error("Error loading file ...")
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Show informational message."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Show success message."""

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show a non-fatal problem."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Show error message."""


class InteractiveFeedback(UserFeedback):
    """Feedback written to stderr with styling."""

    def info(self, message: str) -> None:
        user_output(message)

    def success(self, message: str) -> None:
        user_output(click.style(message, fg="green"))

    def warning(self, message: str) -> None:
        user_output(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        user_output(click.style(message, fg="red"))
