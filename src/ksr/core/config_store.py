"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.ksr/config.toml.
Keys use the same hyphenated names as `ksr config get/set`.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

import tomlkit

DEFAULT_REGISTRY_URL = "http://localhost:8081"
DEFAULT_TIMEOUT_SECONDS = 30.0

OutputFormat = Literal["table", "json", "yaml"]
OUTPUT_FORMATS: tuple[OutputFormat, ...] = ("table", "json", "yaml")

CONFIG_KEYS = (
    "registry-url",
    "username",
    "password",
    "api-key",
    "output",
    "timeout",
    "insecure",
    "context",
)


def parse_output_format(value: str) -> OutputFormat:
    for fmt in OUTPUT_FORMATS:
        if value == fmt:
            return fmt
    raise ValueError(f"invalid output format: {value} (must be table, json, or yaml)")


def parse_bool(value: str) -> bool:
    if value not in ("true", "false"):
        raise ValueError(f"invalid boolean value: {value} (must be true or false)")
    return value == "true"


def parse_timeout(value: str | int | float) -> float:
    """Parse a timeout in seconds; a trailing `s` is accepted ("30s")."""
    text = str(value).strip()
    if text.endswith("s"):
        text = text[:-1]
    try:
        seconds = float(text)
    except ValueError:
        raise ValueError(f"invalid timeout: {value} (must be a number of seconds)") from None
    if seconds <= 0:
        raise ValueError(f"invalid timeout: {value} (must be positive)")
    return seconds


def _format_timeout(seconds: float) -> str:
    if seconds.is_integer():
        return f"{int(seconds)}s"
    return f"{seconds}s"


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    Loaded once at CLI entry point and stored in KsrContext. Root CLI flags
    produce a modified copy for one invocation; the file is never changed
    by them.
    """

    registry_url: str = DEFAULT_REGISTRY_URL
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    output: OutputFormat = "table"
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    insecure: bool = False
    context: str | None = None

    def get_value(self, key: str) -> str | None:
        """Display value for a configuration key, None when unset.

        Raises:
            ValueError: If the key is not a configuration key
        """
        match key:
            case "registry-url":
                return self.registry_url
            case "username":
                return self.username
            case "password":
                return self.password
            case "api-key":
                return self.api_key
            case "output":
                return self.output
            case "timeout":
                return _format_timeout(self.timeout)
            case "insecure":
                return str(self.insecure).lower()
            case "context":
                return self.context
            case _:
                raise ValueError(f"invalid configuration key: {key}")

    def with_value(self, key: str, value: str) -> "GlobalConfig":
        """Return a copy with one key set from its string form.

        Raises:
            ValueError: If the key is unknown or the value is invalid for it
        """
        match key:
            case "registry-url":
                return replace(self, registry_url=value)
            case "username":
                return replace(self, username=value)
            case "password":
                return replace(self, password=value)
            case "api-key":
                return replace(self, api_key=value)
            case "output":
                return replace(self, output=parse_output_format(value))
            case "timeout":
                return replace(self, timeout=parse_timeout(value))
            case "insecure":
                return replace(self, insecure=parse_bool(value))
            case "context":
                return replace(self, context=value)
            case _:
                raise ValueError(f"invalid configuration key: {key}")

    def items(self) -> list[tuple[str, str]]:
        """Set keys and display values, in CONFIG_KEYS order."""
        result: list[tuple[str, str]] = []
        for key in CONFIG_KEYS:
            value = self.get_value(key)
            if value is not None:
                result.append((key, value))
        return result

    @staticmethod
    def from_toml_dict(data: dict[str, Any]) -> "GlobalConfig":
        """Build a config from parsed TOML, ignoring unknown keys.

        Raises:
            ValueError: If a known key holds an invalid value
        """
        config = GlobalConfig()
        for key in CONFIG_KEYS:
            if key not in data:
                continue
            raw = data[key]
            if isinstance(raw, bool):
                raw = str(raw).lower()
            config = config.with_value(key, str(raw))
        return config


class ConfigStore(ABC):
    """Abstract interface for global config operations.

    Provides dependency injection for global config access, enabling
    in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if global config exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load global config.

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If config is malformed
        """
        ...

    @abstractmethod
    def save(self, config: GlobalConfig) -> None:
        """Save global config."""
        ...

    @abstractmethod
    def reset(self) -> None:
        """Replace global config with defaults, dropping every other setting."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the global config file (for messages)."""
        ...


class RealConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.ksr/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()

        if not config_path.exists():
            raise FileNotFoundError(f"Global config not found at {config_path}")

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Malformed config file {config_path}: {e}") from e
        try:
            return GlobalConfig.from_toml_dict(data)
        except ValueError as e:
            raise ValueError(f"Invalid value in {config_path}: {e}") from e

    def save(self, config: GlobalConfig) -> None:
        """Save global config, keeping comments and unknown keys already in the file.

        Raises:
            PermissionError: If directory or file cannot be written
        """
        config_path = self.path()
        parent = config_path.parent

        if parent.exists() and not os.access(parent, os.W_OK):
            raise PermissionError(f"Cannot write to directory: {parent}")

        parent.mkdir(parents=True, exist_ok=True)

        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("ksr configuration"))

        for key in CONFIG_KEYS:
            value = config.get_value(key)
            if value is None:
                if key in doc:
                    del doc[key]
                continue
            if key == "insecure":
                doc[key] = config.insecure
            else:
                doc[key] = value

        with config_path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)

    def reset(self) -> None:
        config_path = self.path()
        if config_path.exists():
            config_path.unlink()
        self.save(GlobalConfig())

    def path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        return Path.home() / ".ksr" / "config.toml"


class FakeConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config
        self._saved: list[GlobalConfig] = []
        self._reset_count = 0

    @property
    def saved(self) -> list[GlobalConfig]:
        """Configs passed to save(), for test assertions."""
        return self._saved

    @property
    def reset_count(self) -> int:
        return self._reset_count

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            raise FileNotFoundError(f"Global config not found at {self.path()}")
        return self._config

    def save(self, config: GlobalConfig) -> None:
        self._config = config
        self._saved.append(config)

    def reset(self) -> None:
        self._config = GlobalConfig()
        self._reset_count += 1

    def path(self) -> Path:
        return Path("/fake/ksr/config.toml")
