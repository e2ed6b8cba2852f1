# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Ready-made schema handler factories.

These adapt existing serialization libraries to the SchemaHandler protocol.
fastavro and protobuf are imported lazily so they are only required when the
corresponding handler is used (``pip install pyschematic[avro]`` /
``pyschematic[protobuf]``).

    >>> helper = (
    ...     SchemaRegistryHelper("http://localhost:8081")
    ...     .with_schema_handler(SchemaType.AVRO, avro_handler)
    ...     .with_schema_handler(SchemaType.JSON, json_handler)
    ... )
"""

from __future__ import annotations

import functools
import io
import json
from typing import Any, Callable, Optional

from .types import SchemaHandler


class AvroHandler:
    """Schemaless Avro binary encoding via fastavro."""

    def __init__(self, schema: str) -> None:
        from fastavro import parse_schema

        self._parsed_schema = parse_schema(json.loads(schema))

    def encode(self, message: Any) -> bytes:
        from fastavro import schemaless_writer

        buffer = io.BytesIO()
        schemaless_writer(buffer, self._parsed_schema, message)
        return buffer.getvalue()

    def decode(self, data: bytes) -> Any:
        from fastavro import schemaless_reader

        return schemaless_reader(io.BytesIO(data), self._parsed_schema)


class JsonHandler:
    """UTF-8 JSON encoding. The schema is kept but not enforced."""

    def __init__(self, schema: str, encoder: Optional[Callable] = None, object_hook: Optional[Callable] = None) -> None:
        self.schema = schema
        self._encoder = encoder
        self._object_hook = object_hook

    def encode(self, message: Any) -> bytes:
        return json.dumps(message, default=self._encoder).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"), object_hook=self._object_hook)


class ProtobufHandler:
    """Protobuf encoding for a generated message class."""

    def __init__(self, msg_class: Any) -> None:
        self._msg_class = msg_class

    def encode(self, message: Any) -> bytes:
        if isinstance(message, self._msg_class):
            return message.SerializeToString()
        # If message is a dict, parse it into the msg_class
        from google.protobuf.json_format import ParseDict

        msg = self._msg_class()
        ParseDict(message, msg)
        return msg.SerializeToString()

    def decode(self, data: bytes) -> Any:
        msg = self._msg_class()
        msg.ParseFromString(data)
        return msg


@functools.lru_cache(maxsize=128)
def avro_handler(schema: str) -> SchemaHandler:
    """
    Factory for AVRO schemas.

    Parsing a schema is comparatively expensive, so parsed handlers are kept
    per serialized schema.
    """
    return AvroHandler(schema)


def json_handler(schema: str) -> SchemaHandler:
    """Factory for JSON schemas."""
    return JsonHandler(schema)


def protobuf_handler_factory(msg_class: Any) -> Callable[[str], SchemaHandler]:
    """
    Build a factory for PROTOBUF schemas.

    The registry's serialized .proto text is not compiled at runtime; the
    generated message class for the schema has to be supplied instead.

    Args:
        msg_class: Generated protobuf message class.
    """
    handler = ProtobufHandler(msg_class)

    def factory(schema: str) -> SchemaHandler:
        return handler

    return factory
