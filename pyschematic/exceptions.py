# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Custom exceptions for the pyschematic SDK.

All exceptions raised by pyschematic itself inherit from SchematicError:

    try:
        helper.encode_for_subject("orders-value", order, schema=schema)
    except SchematicError as e:
        print(f"pyschematic error: {e}")

For more granular error handling, catch specific exception types:

    try:
        helper.decode(raw)
    except RegistryError as e:
        print(f"Registry answered {e.code}: {e.registry_message}")
    except NoSchemaHandlerError as e:
        print(f"Register a handler for {e.schema_type} first")

Network failures are not wrapped. They surface as the transport's own
exceptions (httpx.TransportError and its subclasses).
"""

from __future__ import annotations

from typing import Any

# Error codes the registry uses for "not found" on different sub-resources
NOT_FOUND_CODES: frozenset[int] = frozenset({404, 40401, 40403})
NOT_FOUND: int = 404


class SchematicError(Exception):
    """
    Base exception for all pyschematic errors.

    Carries an optional hint that is appended to the message.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        self.hint = hint
        if hint:
            message = f"{message}\n\n  Hint: {hint}"
        super().__init__(message)


class RegistryError(SchematicError):
    """
    Raised when the schema registry answers with an error body.

    The registry reports "not found" with several codes depending on the
    sub-resource (subject, version, schema). Those are squashed into 404 so
    callers only need to check one value; the registry's own code is kept in
    ``raw_code``.
    """

    def __init__(self, code: int | None, message: str | None = None) -> None:
        self.raw_code = code
        self.code = NOT_FOUND if code in NOT_FOUND_CODES else code
        self.registry_message = message
        super().__init__(f"Schema registry error: code: {self.code} - {message}")

    @property
    def is_not_found(self) -> bool:
        """True if the registry reported a missing subject, version or schema."""
        return self.code == NOT_FOUND


class InvalidResponseError(SchematicError):
    """
    Raised when an error response cannot be classified.

    This happens when the registry returns a non-2xx status with an empty
    body, or with a JSON body that is not an error object.
    """

    def __init__(self, status_code: int, message: str = "Invalid schema registry response") -> None:
        self.status_code = status_code
        super().__init__(
            f"{message} (HTTP {status_code})",
            hint="Check that the base URL points at a schema registry",
        )


class SchemaHandlerError(SchematicError):
    """Base exception for schema handler errors."""


class NoSchemaHandlerError(SchemaHandlerError):
    """Raised when no handler factory is registered for a schema type."""

    def __init__(self, schema_type: Any) -> None:
        self.schema_type = schema_type
        name = getattr(schema_type, "value", schema_type)
        super().__init__(
            f"No protocol handler for protocol {name}",
            hint=f"Register one first: helper.with_schema_handler('{name}', factory)",
        )


class SchemaTypeMismatchError(SchemaHandlerError):
    """
    Raised when the requested schema type differs from the registry's.

    The registry is the authority on which serialization technology a schema
    uses; encoding with a different handler would produce unreadable bytes.
    """

    def __init__(self, requested: Any, registry: Any) -> None:
        self.requested = requested
        self.registry = registry
        super().__init__(
            "Mismatch between schemaType argument and schema registry schemaType: "
            f"{getattr(requested, 'value', requested)} != {getattr(registry, 'value', registry)}"
        )


class WireFormatError(SchematicError):
    """Base exception for wire format errors."""


class InvalidPayloadError(WireFormatError, TypeError):
    """Raised when a payload to be framed is not a byte buffer."""

    def __init__(self, received: Any) -> None:
        self.received_type = type(received)
        super().__init__(
            f"encoded message must be bytes, got {type(received).__name__}",
            hint="Schema handlers must return bytes from encode()",
        )


class InvalidSchemaIdError(WireFormatError, ValueError):
    """Raised when a schema id does not fit in an unsigned 32 bit integer."""

    def __init__(self, schema_id: Any) -> None:
        self.schema_id = schema_id
        super().__init__(f"Schema id out of range: {schema_id!r}, expected 0..4294967295")
