"""Application context with dependency injection."""

import logging
from dataclasses import dataclass, replace
from importlib.metadata import version

import click

from ksr.cli.output import user_output
from ksr.core.config_store import ConfigStore, GlobalConfig, RealConfigStore
from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.real import RealSchemaRegistry
from ksr.core.registry.types import RegistryConnectionSettings
from ksr.core.time.abc import Time
from ksr.core.time.real import RealTime
from ksr.core.user_feedback import InteractiveFeedback, UserFeedback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionOverrides:
    """Root CLI flags that override the config file for one invocation."""

    registry_url: str | None = None
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    insecure: bool = False

    def apply(self, config: GlobalConfig) -> GlobalConfig:
        return replace(
            config,
            registry_url=self.registry_url or config.registry_url,
            username=self.username or config.username,
            password=self.password or config.password,
            api_key=self.api_key or config.api_key,
            insecure=self.insecure or config.insecure,
        )


@dataclass(frozen=True)
class KsrContext:
    """Immutable context holding all dependencies for ksr operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.

    global_config is the effective configuration: the config file (or
    defaults when there is none) with root flag overrides applied.
    """

    registry: SchemaRegistry
    time: Time
    feedback: UserFeedback
    config_store: ConfigStore
    global_config: GlobalConfig
    cli_version: str

    @property
    def default_context(self) -> str | None:
        """Registry context commands use when --context is not given."""
        return self.global_config.context

    @staticmethod
    def for_test(
        registry: SchemaRegistry | None = None,
        time: Time | None = None,
        feedback: UserFeedback | None = None,
        config_store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
        cli_version: str = "0.0.0-test",
    ) -> "KsrContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            registry: Optional SchemaRegistry. If None, creates empty FakeSchemaRegistry.
            time: Optional Time. If None, creates FakeTime.
            feedback: Optional UserFeedback. If None, creates FakeUserFeedback.
            config_store: Optional ConfigStore. If None, creates FakeConfigStore
                holding global_config.
            global_config: Optional GlobalConfig. If None, uses defaults.
            cli_version: Version string recorded in exported snapshots.

        Returns:
            KsrContext configured with provided values and test defaults

        Example:
            >>> registry = FakeSchemaRegistry(subjects={"users-value": [...]})
            >>> ctx = KsrContext.for_test(registry=registry)
            >>> runner.invoke(cli, ["export", "subjects"], obj=ctx)
        """
        from tests.fakes.time import FakeTime
        from tests.fakes.user_feedback import FakeUserFeedback

        from ksr.core.config_store import FakeConfigStore
        from ksr.core.registry.fake import FakeSchemaRegistry

        if registry is None:
            registry = FakeSchemaRegistry()

        if time is None:
            time = FakeTime()

        if feedback is None:
            feedback = FakeUserFeedback()

        if global_config is None:
            global_config = GlobalConfig()

        if config_store is None:
            config_store = FakeConfigStore(config=global_config)

        return KsrContext(
            registry=registry,
            time=time,
            feedback=feedback,
            config_store=config_store,
            global_config=global_config,
            cli_version=cli_version,
        )


def create_context(overrides: ConnectionOverrides) -> KsrContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        overrides: Connection flags given on the command line

    Returns:
        KsrContext with real implementations
    """
    config_store = RealConfigStore()

    file_config = GlobalConfig()
    if config_store.exists():
        try:
            file_config = config_store.load()
        except ValueError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from e

    global_config = overrides.apply(file_config)
    logger.debug(
        "Connecting to %s (context=%s, timeout=%ss, insecure=%s)",
        global_config.registry_url,
        global_config.context,
        global_config.timeout,
        global_config.insecure,
    )

    registry = RealSchemaRegistry(
        RegistryConnectionSettings(
            base_url=global_config.registry_url,
            username=global_config.username,
            password=global_config.password,
            api_key=global_config.api_key,
            timeout_seconds=global_config.timeout,
            insecure=global_config.insecure,
        )
    )

    return KsrContext(
        registry=registry,
        time=RealTime(),
        feedback=InteractiveFeedback(),
        config_store=config_store,
        global_config=global_config,
        cli_version=version("ksr"),
    )
