# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Schema registry client.

A client for the REST API of Confluent-compatible schema registries:
https://docs.confluent.io/platform/current/schema-registry/develop/api.html

Usage Patterns:

    # Pattern 1: Context manager (recommended for applications)
    from pyschematic import SchemaRegistryClient
    with SchemaRegistryClient("http://localhost:8081") as client:
        subjects = client.list_subjects()

    # Pattern 2: Explicit lifecycle management
    client = SchemaRegistryClient("https://registry:8081", username="u", password="p")
    try:
        schema = client.get_schema_by_id(1)
    finally:
        client.close()

Every call performs exactly one request/response round trip. Nothing is
retried; transport failures propagate as httpx exceptions.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Literal, Union
from urllib.parse import quote

import httpx

from .cache import FunctionCacher
from .exceptions import InvalidResponseError, RegistryError
from .models import RegistryConfig, SchemaDefinition, SchemaReference, SubjectVersion
from .tls import TLSConfig
from .types import DEFAULT_SCHEMA_TYPE, CompatibilityMode, SchemaType

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/vnd.schemaregistry.v1+json"

References = Sequence[Union[SchemaReference, "dict[str, Any]"]]


def _subject_path(subject: str) -> str:
    return quote(subject, safe="")


def _schema_body(
    schema: str,
    schema_type: SchemaType | str | None,
    references: References | None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"schema": schema}
    if schema_type is not None:
        body["schemaType"] = SchemaType(schema_type).value
    if references is not None:
        body["references"] = [
            ref.model_dump() if isinstance(ref, SchemaReference) else dict(ref)
            for ref in references
        ]
    return body


class SchemaRegistryClient:
    """
    Client for a schema registry's HTTP API.

    The client holds no state besides its connection pool. Non-2xx responses
    are normalized into RegistryError (or InvalidResponseError when the body
    is empty).

    Example:
        >>> client = SchemaRegistryClient("http://localhost:8081")
        >>> client.list_subjects()
        ['orders-value']
        >>> client.get_latest_version_for_subject("orders-value").id
        1
        >>> client.close()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        config: RegistryConfig | None = None,
        tls: TLSConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize schema registry client.

        Args:
            base_url: Registry URL, may contain a path prefix and credentials.
                Defaults to the config's URL, then to http://localhost:8081.
            config: Optional RegistryConfig object.
            tls: Optional TLSConfig for https registries.
            transport: Optional httpx transport (useful for testing).
            **kwargs: Override config options (username, password, timeout_seconds).
        """
        if config is None:
            if base_url is not None:
                kwargs["base_url"] = base_url
            config = RegistryConfig(**kwargs)
        else:
            if base_url is not None:
                config.base_url = base_url
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self._config = config

        url = httpx.URL(config.base_url)
        username = config.username or url.username
        password = config.password or url.password
        if url.userinfo:
            url = url.copy_with(username=None, password=None)

        self._http = httpx.Client(
            base_url=url,
            headers={
                "Accept": CONTENT_TYPE,
                "Content-Type": CONTENT_TYPE,
                "User-Agent": config.user_agent,
            },
            auth=(username, password) if username and password else None,
            timeout=httpx.Timeout(config.timeout_seconds),
            verify=tls.verify() if tls else True,
            transport=transport,
        )

    @property
    def config(self) -> RegistryConfig:
        """Return the client configuration."""
        return self._config

    @property
    def base_url(self) -> httpx.URL:
        """Base URL requests are resolved against, without credentials."""
        return self._http.base_url

    def close(self) -> None:
        """Close the connection pool."""
        self._http.close()

    def __enter__(self) -> SchemaRegistryClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    # =========================================================================
    # Schemas
    # =========================================================================

    def get_schema_by_id(self, schema_id: int) -> SchemaDefinition:
        """
        Get a schema by its id.

        Args:
            schema_id: Id of the schema to fetch.

        Returns:
            Serialized schema and its type (the type is omitted by the
            registry for AVRO).
        """
        data = self._request_json("GET", f"schemas/ids/{schema_id}")
        return SchemaDefinition.model_validate(data)

    def get_schema_types(self) -> list[str]:
        """Get the schema types the registry supports (typically AVRO, PROTOBUF and JSON)."""
        return self._request_json("GET", "schemas/types")

    def list_versions_for_id(self, schema_id: int) -> list[SubjectVersion]:
        """
        Get subject/version pairs for a schema id.

        Args:
            schema_id: Id of a registered schema.

        Returns:
            Every subject and version the schema is registered under.
        """
        data = self._request_json("GET", f"schemas/ids/{schema_id}/versions")
        return [SubjectVersion.model_validate(item) for item in data]

    # =========================================================================
    # Subjects
    # =========================================================================

    def list_subjects(self) -> list[str]:
        """Get the list of registered subjects."""
        return self._request_json("GET", "subjects")

    def list_versions_for_subject(self, subject: str) -> list[int]:
        """Get the versions registered under a subject."""
        return self._request_json("GET", f"subjects/{_subject_path(subject)}/versions")

    def delete_subject(self, subject: str, permanent: bool = False) -> list[int]:
        """
        Delete a subject.

        Should only be used in development; don't delete schemas in production.

        Args:
            subject: Subject name.
            permanent: Hard delete. The subject must be soft deleted first.

        Returns:
            Deleted schema versions.
        """
        return self._request_json(
            "DELETE",
            f"subjects/{_subject_path(subject)}",
            params={"permanent": "true"} if permanent else None,
        )

    def delete_subject_version(
        self,
        subject: str,
        version: int | Literal["latest"],
        permanent: bool = False,
    ) -> int:
        """Delete one version of a subject and return its version number."""
        return self._request_json(
            "DELETE",
            f"subjects/{_subject_path(subject)}/versions/{version}",
            params={"permanent": "true"} if permanent else None,
        )

    def get_schema_for_subject_and_version(
        self,
        subject: str,
        version: int | None = None,
    ) -> SchemaDefinition:
        """
        Get the schema registered under a subject and version.

        Args:
            subject: Subject name.
            version: Version to retrieve; the latest version if omitted.

        Returns:
            Schema and its metadata.
        """
        path = f"subjects/{_subject_path(subject)}/versions/{'latest' if version is None else version}"
        return SchemaDefinition.model_validate(self._request_json("GET", path))

    def get_latest_version_for_subject(self, subject: str) -> SchemaDefinition:
        """Alias for get_schema_for_subject_and_version with the latest version."""
        return self.get_schema_for_subject_and_version(subject)

    def get_raw_schema_for_subject_and_version(self, subject: str, version: int) -> str:
        """
        Get only the serialized schema for a subject and version.

        The body is returned verbatim, it is not JSON decoded.
        """
        response = self._request(
            "GET", f"subjects/{_subject_path(subject)}/versions/{version}/schema"
        )
        return response.text

    def get_referenced_by(self, subject: str, version: int) -> list[int]:
        """Get the ids of schemas that reference the given subject version."""
        return self._request_json(
            "GET", f"subjects/{_subject_path(subject)}/versions/{version}/referencedby"
        )

    def register_schema(
        self,
        subject: str,
        schema: str,
        schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
        references: References | None = None,
    ) -> SchemaDefinition:
        """
        Register a schema under a subject.

        Registering a schema that already exists under the subject returns the
        existing id. The API documents subject, version and schema in the
        response, but registries typically answer with the id only.

        Args:
            subject: Subject name.
            schema: Serialized schema.
            schema_type: Schema type.
            references: Schemas this schema references.

        Returns:
            Schema metadata (possibly only the id).
        """
        data = self._request_json(
            "POST",
            f"subjects/{_subject_path(subject)}/versions",
            body=_schema_body(schema, schema_type, references),
        )
        return SchemaDefinition.model_validate(data)

    def check_schema(
        self,
        subject: str,
        schema: str,
        schema_type: SchemaType | str | None = None,
        references: References | None = None,
    ) -> SchemaDefinition:
        """
        Look up a schema already registered under a subject.

        Never creates a new version.

        Args:
            subject: Subject name.
            schema: Serialized schema.
            schema_type: Schema type (the registry assumes AVRO if omitted).
            references: Schemas this schema references.

        Returns:
            Subject, id, version and schema of the matching registration.

        Raises:
            RegistryError: With code 404 if the schema is not registered.
        """
        data = self._request_json(
            "POST",
            f"subjects/{_subject_path(subject)}",
            body=_schema_body(schema, schema_type, references),
        )
        return SchemaDefinition.model_validate(data)

    # =========================================================================
    # Compatibility
    # =========================================================================

    def test_compatibility(
        self,
        subject: str,
        schema: str,
        version: int | Literal["latest"] = "latest",
        schema_type: SchemaType | str | None = None,
        references: References | None = None,
        verbose: bool = False,
    ) -> bool:
        """
        Test a schema against a subject version.

        Returns:
            Whether the schema is compatible, given the subject's
            compatibility mode.
        """
        data = self._request_json(
            "POST",
            f"compatibility/subjects/{_subject_path(subject)}/versions/{version}",
            body=_schema_body(schema, schema_type, references),
            params={"verbose": "true"} if verbose else None,
        )
        return bool(data["is_compatible"])

    # =========================================================================
    # Config
    # =========================================================================

    def set_config(self, compatibility: CompatibilityMode | str) -> CompatibilityMode:
        """
        Set the registry's default compatibility mode.

        Returns:
            The new mode as echoed by the registry.
        """
        body = {"compatibility": CompatibilityMode(compatibility).value}
        data = self._request_json("PUT", "config", body=body)
        return CompatibilityMode(data["compatibility"])

    def get_config(self) -> CompatibilityMode:
        """Get the registry's default compatibility mode."""
        return CompatibilityMode(self._request_json("GET", "config")["compatibilityLevel"])

    def set_subject_config(
        self,
        subject: str,
        compatibility: CompatibilityMode | str,
    ) -> CompatibilityMode:
        """
        Set the compatibility mode for a subject.

        Returns:
            The new mode as echoed by the registry.
        """
        body = {"compatibility": CompatibilityMode(compatibility).value}
        data = self._request_json("PUT", f"config/{_subject_path(subject)}", body=body)
        return CompatibilityMode(data["compatibility"])

    def get_subject_config(self, subject: str) -> CompatibilityMode:
        """Get the compatibility mode for a subject."""
        data = self._request_json("GET", f"config/{_subject_path(subject)}")
        return CompatibilityMode(data["compatibilityLevel"])

    # =========================================================================
    # Internal
    # =========================================================================

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        return json.loads(self._request(method, path, body=body, params=params).text)

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        content = json.dumps(body).encode("utf-8") if body is not None else None
        response = self._http.request(method, path, content=content, params=params)
        logger.debug("%s %s -> %d", method, response.request.url, response.status_code)

        if response.is_success:
            return response

        text = response.text
        if not text:
            raise InvalidResponseError(response.status_code)

        # A body that is not JSON surfaces as json.JSONDecodeError
        payload = json.loads(text)
        if not isinstance(payload, dict):
            raise InvalidResponseError(
                response.status_code, "Unexpected schema registry error body"
            )
        raise RegistryError(payload.get("error_code", response.status_code), payload.get("message"))


class CachedSchemaRegistryClient:
    """
    Schema registry client that caches the lookups used for encoding.

    Wraps a plain SchemaRegistryClient. check_schema,
    get_latest_version_for_subject and get_schema_by_id are served from a
    FunctionCacher; every other operation goes straight to the wrapped client.

    Example:
        >>> client = CachedSchemaRegistryClient(SchemaRegistryClient())
        >>> client.get_schema_by_id(1)  # hits the registry
        >>> client.get_schema_by_id(1)  # served from the cache
        >>> client.cacher.clear()
    """

    def __init__(self, client: SchemaRegistryClient, cacher: FunctionCacher | None = None) -> None:
        self._client = client
        self.cacher = cacher if cacher is not None else FunctionCacher()

        self.check_schema = self.cacher.wrap(client.check_schema, [True, True, True, True])
        self.get_latest_version_for_subject = self.cacher.wrap(
            client.get_latest_version_for_subject, [True]
        )
        self.get_schema_by_id = self.cacher.wrap(client.get_schema_by_id, [True])

    @property
    def client(self) -> SchemaRegistryClient:
        """The wrapped, uncached client."""
        return self._client

    def __getattr__(self, name: str) -> Any:
        if name == "_client":
            raise AttributeError(name)
        return getattr(self._client, name)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> CachedSchemaRegistryClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
