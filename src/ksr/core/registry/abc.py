"""Abstract base class for Schema Registry operations."""

from abc import ABC, abstractmethod

from ksr.core.registry.types import (
    CompatibilityResult,
    RegistryConfig,
    RegistryInfo,
    RegistryMode,
    Schema,
    SchemaRequest,
    VersionSelector,
)


class SchemaRegistry(ABC):
    """Abstract interface for Schema Registry operations.

    All implementations (real and fake) must implement this interface.
    Every operation takes a context; None or "." addresses the default context.
    Failures raise RegistryError. No implementation retries.
    """

    @abstractmethod
    def list_subjects(self, context: str | None) -> list[str]:
        """List subject names in a context."""
        ...

    @abstractmethod
    def list_versions(self, subject: str, context: str | None) -> list[int]:
        """List version numbers registered for a subject, ascending."""
        ...

    @abstractmethod
    def get_schema(self, subject: str, version: VersionSelector, context: str | None) -> Schema:
        """Fetch one schema version.

        Args:
            subject: Subject name
            version: Version number, or "latest"
            context: Registry context

        Raises:
            RegistryError: If the subject or version does not exist (HTTP 404)
        """
        ...

    @abstractmethod
    def register_schema(self, subject: str, request: SchemaRequest, context: str | None) -> int:
        """Register a schema under a subject and return the assigned schema ID."""
        ...

    @abstractmethod
    def get_global_config(self, context: str | None) -> RegistryConfig:
        """Get the global compatibility configuration."""
        ...

    @abstractmethod
    def set_global_config(self, config: RegistryConfig, context: str | None) -> RegistryConfig:
        """Set the global compatibility configuration."""
        ...

    @abstractmethod
    def get_subject_config(self, subject: str, context: str | None) -> RegistryConfig | None:
        """Get subject-level configuration.

        Returns:
            The subject's configuration, or None when the subject has no
            subject-level configuration and falls back to the global default
        """
        ...

    @abstractmethod
    def set_subject_config(
        self, subject: str, config: RegistryConfig, context: str | None
    ) -> RegistryConfig:
        """Set subject-level configuration."""
        ...

    @abstractmethod
    def get_global_mode(self, context: str | None) -> RegistryMode:
        """Get the registry-wide mode."""
        ...

    @abstractmethod
    def set_global_mode(self, mode: RegistryMode, context: str | None) -> RegistryMode:
        """Set the registry-wide mode."""
        ...

    @abstractmethod
    def get_subject_mode(self, subject: str, context: str | None) -> RegistryMode | None:
        """Get a subject's mode, or None when the subject inherits the global mode."""
        ...

    @abstractmethod
    def set_subject_mode(
        self, subject: str, mode: RegistryMode, context: str | None
    ) -> RegistryMode:
        """Set a subject's mode."""
        ...

    @abstractmethod
    def delete_subject(self, subject: str, context: str | None, *, permanent: bool) -> list[int]:
        """Delete a subject and return the deleted version numbers.

        Args:
            subject: Subject name
            context: Registry context
            permanent: If True, hard-delete (the subject must be soft-deleted first)
        """
        ...

    @abstractmethod
    def delete_subject_version(
        self, subject: str, version: int, context: str | None, *, permanent: bool
    ) -> None:
        """Delete one version of a subject."""
        ...

    @abstractmethod
    def check_compatibility(
        self,
        subject: str,
        request: SchemaRequest,
        version: VersionSelector,
        context: str | None,
    ) -> CompatibilityResult:
        """Test a candidate schema against one version of a subject.

        Args:
            subject: Subject name
            request: Candidate schema (ID and version are ignored)
            version: Version to test against, or "latest"
            context: Registry context

        Raises:
            RegistryError: If the subject or version does not exist
        """
        ...

    @abstractmethod
    def list_contexts(self) -> list[str]:
        """List registry contexts; empty when the registry has no contexts endpoint."""
        ...

    @abstractmethod
    def get_registry_info(self) -> RegistryInfo:
        """Server version and cluster metadata, with unreported fields left as None."""
        ...
