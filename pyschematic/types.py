# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Type definitions for the pyschematic SDK."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable


class SchemaType(str, Enum):
    """
    Supported schema types.

    The registry assumes AVRO whenever a schema type is not given.
    """

    AVRO = "AVRO"
    PROTOBUF = "PROTOBUF"
    JSON = "JSON"


DEFAULT_SCHEMA_TYPE: SchemaType = SchemaType.AVRO


class CompatibilityMode(str, Enum):
    """Schema compatibility modes enforced by the registry."""

    BACKWARD = "BACKWARD"
    BACKWARD_TRANSITIVE = "BACKWARD_TRANSITIVE"
    FORWARD = "FORWARD"
    FORWARD_TRANSITIVE = "FORWARD_TRANSITIVE"
    FULL = "FULL"
    FULL_TRANSITIVE = "FULL_TRANSITIVE"
    NONE = "NONE"


@runtime_checkable
class SchemaHandler(Protocol):
    """Encodes and decodes messages for one concrete schema."""

    def encode(self, message: Any) -> bytes:
        ...

    def decode(self, data: bytes) -> Any:
        ...


# Called with the serialized schema every time a message is encoded/decoded.
# Factories that are expensive to call should memoize internally.
SchemaHandlerFactory = Callable[[str], SchemaHandler]
