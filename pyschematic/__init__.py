# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
pyschematic - Schema registry aware message encoding for Python.

Encode and decode event streaming messages with schemas held in a
Confluent-compatible schema registry:
- Schema lookup, registration and caching
- Schema registry wire format (magic byte + 4 byte schema id)
- Pluggable handlers per schema type (AVRO, PROTOBUF, JSON)
- Full registry client (subjects, versions, compatibility, config)

Quick Start:
    >>> from pyschematic import SchemaRegistryHelper, SchemaType, avro_handler
    >>>
    >>> helper = SchemaRegistryHelper("http://localhost:8081").with_schema_handler(
    ...     SchemaType.AVRO, avro_handler
    ... )
    >>> schema = '{"type": "record", "name": "Greeting", "fields": [{"name": "hello", "type": "string"}]}'
    >>> raw = helper.encode_for_subject("greetings-value", {"hello": "world"}, schema=schema)
    >>> helper.decode(raw)
    {'hello': 'world'}

Custom handlers:
    >>> def my_handler(schema: str):
    ...     return MyCodec(schema)  # anything with encode(message) and decode(data)
    >>> helper.with_schema_handler(SchemaType.PROTOBUF, my_handler)

Messages without the schema preamble pass through decode() unchanged.

Registry client only:
    >>> from pyschematic import SchemaRegistryClient
    >>>
    >>> with SchemaRegistryClient("https://registry:8081", username="u", password="p") as client:
    ...     client.list_subjects()
    ['greetings-value']

Reactive streams:
    >>> from pyschematic import reactive
    >>> source.pipe(reactive.decode(helper)).subscribe(on_next=print)
"""

from .cache import FunctionCacher
from .client import CachedSchemaRegistryClient, SchemaRegistryClient
from .exceptions import (
    InvalidPayloadError,
    InvalidResponseError,
    InvalidSchemaIdError,
    NoSchemaHandlerError,
    RegistryError,
    SchemaHandlerError,
    SchematicError,
    SchemaTypeMismatchError,
    WireFormatError,
)
from .handlers import avro_handler, json_handler, protobuf_handler_factory
from .models import (
    DecodedMessage,
    RegisteredSchema,
    RegistryConfig,
    SchemaDefinition,
    SchemaReference,
    SubjectVersion,
)
from .registry import SchemaRegistryHelper
from .serde import RegistryDeserializer, RegistrySerializer, topic_subject
from .tls import TLSConfig
from .types import CompatibilityMode, SchemaHandler, SchemaHandlerFactory, SchemaType
from .wire import FramedMessage, frame, unframe

__version__ = "1.0.0"
__author__ = "Firefly Software Solutions Inc."
__license__ = "Apache-2.0"

__all__ = [
    # Helper
    "SchemaRegistryHelper",
    # Client
    "SchemaRegistryClient",
    "CachedSchemaRegistryClient",
    "FunctionCacher",
    # TLS
    "TLSConfig",
    # Wire format
    "FramedMessage",
    "frame",
    "unframe",
    # Handlers
    "avro_handler",
    "json_handler",
    "protobuf_handler_factory",
    # Serde
    "RegistrySerializer",
    "RegistryDeserializer",
    "topic_subject",
    # Configuration
    "RegistryConfig",
    # Types
    "SchemaType",
    "CompatibilityMode",
    "SchemaHandler",
    "SchemaHandlerFactory",
    # Models
    "SchemaDefinition",
    "SchemaReference",
    "SubjectVersion",
    "RegisteredSchema",
    "DecodedMessage",
    # Exceptions
    "SchematicError",
    "RegistryError",
    "InvalidResponseError",
    "SchemaHandlerError",
    "NoSchemaHandlerError",
    "SchemaTypeMismatchError",
    "WireFormatError",
    "InvalidPayloadError",
    "InvalidSchemaIdError",
]
