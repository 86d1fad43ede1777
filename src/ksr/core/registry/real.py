"""Production implementation of Schema Registry operations over HTTP."""

import logging
from typing import Any
from urllib.parse import quote

import requests

from ksr.core.registry.abc import SchemaRegistry
from ksr.core.registry.types import (
    ERROR_CODE_SUBJECT_MODE_NOT_FOUND,
    CompatibilityResult,
    RegistryConfig,
    RegistryConnectionError,
    RegistryConnectionSettings,
    RegistryError,
    RegistryInfo,
    RegistryMode,
    Schema,
    SchemaReference,
    SchemaRequest,
    VersionSelector,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/vnd.schemaregistry.v1+json"


def _path_segment(value: str | int) -> str:
    return quote(str(value), safe="")


def _context_params(context: str | None) -> dict[str, str]:
    if context is None or context in ("", "."):
        return {}
    return {"context": context}


def parse_schema_response(data: dict[str, Any], subject: str) -> Schema:
    """Convert a GET /subjects/{subject}/versions/{version} payload to a Schema."""
    return Schema(
        subject=str(data.get("subject", subject)),
        version=int(data["version"]),
        schema_id=int(data["id"]),
        schema=str(data["schema"]),
        schema_type=data.get("schemaType"),
        references=tuple(SchemaReference.from_dict(ref) for ref in data.get("references") or []),
    )


def error_from_response(response: requests.Response) -> RegistryError:
    """Build a RegistryError from a non-2xx registry response.

    The registry answers with {"error_code": int, "message": str}; any other
    body is reported verbatim.
    """
    try:
        body = response.json()
    except ValueError:
        return RegistryError(response.status_code, response.text.strip())
    if not isinstance(body, dict) or "message" not in body:
        return RegistryError(response.status_code, response.text.strip())
    error_code = body.get("error_code")
    return RegistryError(
        response.status_code,
        str(body["message"]),
        int(error_code) if error_code is not None else None,
    )


class RealSchemaRegistry(SchemaRegistry):
    """Production implementation using the registry's REST API.

    All operations issue one blocking HTTP request through a requests.Session.
    """

    def __init__(
        self,
        settings: RegistryConnectionSettings,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize RealSchemaRegistry.

        Args:
            settings: Base URL, credentials, timeout and TLS options
            session: Optional session (tests pass a mock)
        """
        self._settings = settings
        self._base_url = settings.base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"Content-Type": CONTENT_TYPE, "Accept": CONTENT_TYPE})
        if settings.api_key:
            self._session.headers["Authorization"] = f"Bearer {settings.api_key}"
        elif settings.username and settings.password:
            self._session.auth = (settings.username, settings.password)
        self._session.verify = not settings.insecure

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request(
        self,
        method: str,
        path: str,
        *,
        context: str | None,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        all_params = _context_params(context)
        if params:
            all_params.update(params)
        url = f"{self._base_url}{path}"
        logger.debug("%s %s params=%s", method, url, all_params)

        try:
            response = self._session.request(
                method,
                url,
                json=body,
                params=all_params or None,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise RegistryConnectionError(str(e)) from e

        if not response.ok:
            raise error_from_response(response)
        if not response.content:
            return None
        return response.json()

    def list_subjects(self, context: str | None) -> list[str]:
        data = self._request("GET", "/subjects", context=context)
        return [str(subject) for subject in data or []]

    def list_versions(self, subject: str, context: str | None) -> list[int]:
        data = self._request(
            "GET", f"/subjects/{_path_segment(subject)}/versions", context=context
        )
        return [int(version) for version in data or []]

    def get_schema(self, subject: str, version: VersionSelector, context: str | None) -> Schema:
        data = self._request(
            "GET",
            f"/subjects/{_path_segment(subject)}/versions/{_path_segment(version)}",
            context=context,
        )
        return parse_schema_response(data, subject)

    def register_schema(self, subject: str, request: SchemaRequest, context: str | None) -> int:
        data = self._request(
            "POST",
            f"/subjects/{_path_segment(subject)}/versions",
            context=context,
            body=request.to_dict(),
        )
        return int(data["id"])

    def get_global_config(self, context: str | None) -> RegistryConfig:
        data = self._request("GET", "/config", context=context)
        return RegistryConfig.from_dict(data or {})

    def set_global_config(self, config: RegistryConfig, context: str | None) -> RegistryConfig:
        data = self._request("PUT", "/config", context=context, body=config.to_update_request())
        return RegistryConfig.from_dict(data or {})

    def get_subject_config(self, subject: str, context: str | None) -> RegistryConfig | None:
        """Get subject-level configuration.

        Note: Uses try/except because the registry signals "no subject-level
        config" only through a 404; there is no way to ask first. Registries
        disagree on the error code (40408, 40401, or none), so any 404 counts.
        """
        try:
            data = self._request(
                "GET",
                f"/config/{_path_segment(subject)}",
                context=context,
                params={"defaultToGlobal": "false"},
            )
        except RegistryError as e:
            if e.is_not_found:
                logger.debug("No subject-level config for %s: %s", subject, e)
                return None
            raise
        return RegistryConfig.from_dict(data or {})

    def set_subject_config(
        self, subject: str, config: RegistryConfig, context: str | None
    ) -> RegistryConfig:
        data = self._request(
            "PUT",
            f"/config/{_path_segment(subject)}",
            context=context,
            body=config.to_update_request(),
        )
        return RegistryConfig.from_dict(data or {})

    def get_global_mode(self, context: str | None) -> RegistryMode:
        data = self._request("GET", "/mode", context=context)
        return RegistryMode(data["mode"])

    def set_global_mode(self, mode: RegistryMode, context: str | None) -> RegistryMode:
        data = self._request("PUT", "/mode", context=context, body={"mode": mode.value})
        return RegistryMode(data["mode"])

    def get_subject_mode(self, subject: str, context: str | None) -> RegistryMode | None:
        try:
            data = self._request(
                "GET",
                f"/mode/{_path_segment(subject)}",
                context=context,
                params={"defaultToGlobal": "false"},
            )
        except RegistryError as e:
            if e.error_code == ERROR_CODE_SUBJECT_MODE_NOT_FOUND:
                return None
            raise
        return RegistryMode(data["mode"])

    def set_subject_mode(
        self, subject: str, mode: RegistryMode, context: str | None
    ) -> RegistryMode:
        data = self._request(
            "PUT", f"/mode/{_path_segment(subject)}", context=context, body={"mode": mode.value}
        )
        return RegistryMode(data["mode"])

    def delete_subject(self, subject: str, context: str | None, *, permanent: bool) -> list[int]:
        params = {"permanent": "true"} if permanent else None
        data = self._request(
            "DELETE", f"/subjects/{_path_segment(subject)}", context=context, params=params
        )
        return [int(version) for version in data or []]

    def delete_subject_version(
        self, subject: str, version: int, context: str | None, *, permanent: bool
    ) -> None:
        params = {"permanent": "true"} if permanent else None
        self._request(
            "DELETE",
            f"/subjects/{_path_segment(subject)}/versions/{version}",
            context=context,
            params=params,
        )

    def check_compatibility(
        self,
        subject: str,
        request: SchemaRequest,
        version: VersionSelector,
        context: str | None,
    ) -> CompatibilityResult:
        body = SchemaRequest(
            schema=request.schema,
            schema_type=request.schema_type,
            references=request.references,
        ).to_dict()
        data = self._request(
            "POST",
            f"/compatibility/subjects/{_path_segment(subject)}/versions/{_path_segment(version)}",
            context=context,
            body=body,
        )
        return CompatibilityResult.from_dict(data or {})

    def list_contexts(self) -> list[str]:
        try:
            data = self._request("GET", "/contexts", context=None)
        except RegistryError as e:
            if e.is_not_found:
                logger.debug("Registry has no contexts endpoint: %s", e)
                return []
            raise
        return [str(context) for context in data or []]

    def get_registry_info(self) -> RegistryInfo:
        version: str | None = None
        commit: str | None = None
        cluster_id: str | None = None

        # Both metadata endpoints are optional; report whatever the server answers
        try:
            data = self._request("GET", "/v1/metadata/version", context=None) or {}
            version = data.get("version")
            commit = data.get("commitId")
        except RegistryError as e:
            logger.debug("Registry does not report its version: %s", e)

        try:
            data = self._request("GET", "/v1/metadata/id", context=None) or {}
            clusters = (data.get("scope") or {}).get("clusters") or {}
            cluster_id = clusters.get("kafka-cluster")
        except RegistryError as e:
            logger.debug("Registry does not report its cluster ID: %s", e)

        return RegistryInfo(version=version, commit=commit, kafka_cluster_id=cluster_id)
