# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Pydantic models for the pyschematic SDK.

Provides validated configuration and the typed views of schema registry
responses. Response models ignore fields they do not know about so that newer
registry versions keep working.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import SchemaType


# ============================================================================
# Configuration Models
# ============================================================================


class RegistryConfig(BaseModel):
    """Configuration for the schema registry client."""

    model_config = ConfigDict(validate_assignment=True)

    base_url: str = Field(
        default="http://localhost:8081",
        description="Registry base URL; the scheme selects plaintext or TLS",
    )
    username: str | None = None
    password: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    user_agent: str = "pyschematic"

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v

    @property
    def uses_tls(self) -> bool:
        """True if the base URL selects https."""
        return self.base_url.startswith("https://")


# ============================================================================
# Registry Models
# ============================================================================


def _schema_type_or_tag(v: Any) -> Any:
    # Types without a SchemaType member (newer registries) stay plain strings
    if isinstance(v, str) and not isinstance(v, SchemaType):
        try:
            return SchemaType(v)
        except ValueError:
            return v
    return v


class SchemaReference(BaseModel):
    """Reference from one schema to a schema registered under another subject."""

    model_config = ConfigDict(frozen=True)

    name: str
    subject: str
    version: int


class SchemaDefinition(BaseModel):
    """
    Schema record as returned by the registry.

    Every field is optional because different endpoints return different
    subsets: registering answers with the id only, fetching by id answers
    without subject and version.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    subject: str | None = None
    id: int | None = None
    version: int | None = None
    definition: str | None = Field(default=None, alias="schema")
    schema_type: SchemaType | str | None = Field(default=None, alias="schemaType")
    references: list[SchemaReference] = Field(default_factory=list)

    @field_validator("schema_type", mode="before")
    @classmethod
    def validate_schema_type(cls, v: Any) -> Any:
        return _schema_type_or_tag(v)


class SubjectVersion(BaseModel):
    """A subject/version pair a schema id is registered under."""

    model_config = ConfigDict(frozen=True)

    subject: str
    version: int


class RegisteredSchema(BaseModel):
    """Outcome of making sure a schema is known to the registry."""

    model_config = ConfigDict(frozen=True)

    id: int
    definition: str
    schema_type: SchemaType | str

    @field_validator("schema_type", mode="before")
    @classmethod
    def validate_schema_type(cls, v: Any) -> Any:
        return _schema_type_or_tag(v)


class DecodedMessage(BaseModel):
    """A decoded message with the subjects its schema is registered under."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: Any
    subjects: list[SubjectVersion] | None = None
