# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Schema registry aware message encoding.

SchemaRegistryHelper ties the cached registry client, the per schema type
handler factories and the wire format together:

    >>> helper = SchemaRegistryHelper("http://localhost:8081").with_schema_handler(
    ...     SchemaType.AVRO, avro_handler
    ... )
    >>> raw = helper.encode_for_subject("orders-value", order, schema=order_schema)
    >>> helper.decode(raw) == order
    True
"""

from __future__ import annotations

import logging
from typing import Any

from .client import CachedSchemaRegistryClient, References, SchemaRegistryClient
from .exceptions import NoSchemaHandlerError, RegistryError, SchemaTypeMismatchError
from .models import DecodedMessage, RegisteredSchema
from .types import DEFAULT_SCHEMA_TYPE, SchemaHandlerFactory, SchemaType
from .wire import frame, unframe

logger = logging.getLogger(__name__)


class SchemaRegistryHelper:
    """
    Encode and decode messages with schemas held in a schema registry.

    Handler factories are called with the serialized schema every time a
    message is encoded or decoded. It is the factory's responsibility to
    cache expensive handlers.

    Registry lookups go through a CachedSchemaRegistryClient, so a schema id
    or subject is only resolved once per process unless the cache is
    cleared (``helper.schema_registry_client.cacher.clear()``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: SchemaRegistryClient | None = None,
        **client_kwargs: Any,
    ) -> None:
        """
        Initialize the helper.

        Args:
            base_url: Registry URL, used when no client is given. Defaults
                to the URL of ``config`` when one is passed in client_kwargs.
            client: Optional pre-built SchemaRegistryClient.
            **client_kwargs: Passed to SchemaRegistryClient (config, tls,
                transport, username, password, ...).
        """
        if client is None:
            client = SchemaRegistryClient(base_url, **client_kwargs)
        self.schema_handlers: dict[SchemaType, SchemaHandlerFactory] = {}
        self.schema_registry_client = CachedSchemaRegistryClient(client)

    def close(self) -> None:
        """Close the underlying registry client."""
        self.schema_registry_client.close()

    def __enter__(self) -> SchemaRegistryHelper:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def with_schema_handler(
        self,
        schema_type: SchemaType | str,
        factory: SchemaHandlerFactory,
    ) -> SchemaRegistryHelper:
        """
        Add a handler factory for a schema type.

        Re-registering a schema type replaces its factory.

        Returns:
            The helper, for chaining.
        """
        self.schema_handlers[SchemaType(schema_type)] = factory
        return self

    def ensure_schema_registered(
        self,
        subject: str,
        schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
        schema: str | None = None,
        references: References | None = None,
    ) -> RegisteredSchema:
        """
        Resolve the schema for a subject, registering it if necessary.

        With a schema, the registry is first asked whether it already knows
        it so no duplicate version is created; only a 404 leads to
        registration. Without a schema (None or empty), the subject's latest
        version is used.

        Two callers racing to register the same schema may both get the 404
        and both register. The registry treats identical registrations as
        idempotent.

        Args:
            subject: Subject name (for topics: ``<topic>-key`` / ``<topic>-value``).
            schema_type: Schema type of ``schema``.
            schema: Serialized schema to look up or register.
            references: Schemas ``schema`` references.

        Returns:
            Schema id, serialized schema and schema type.

        Raises:
            RegistryError: For any registry error other than the lookup 404.
        """
        schema_type = SchemaType(schema_type)
        client = self.schema_registry_client

        if not schema:
            latest = client.get_latest_version_for_subject(subject)
            return RegisteredSchema(
                id=latest.id,
                definition=latest.definition,
                schema_type=latest.schema_type or schema_type,
            )

        try:
            found = client.check_schema(subject, schema, schema_type, references)
        except RegistryError as e:
            if not e.is_not_found:
                raise
            logger.debug("schema not registered under %s, registering", subject)
            created = client.register_schema(subject, schema, schema_type, references)
            # Compatibility shim: registries usually answer with the id only, so
            # missing fields are backfilled from the request
            return RegisteredSchema(
                id=created.id,
                definition=created.definition or schema,
                schema_type=created.schema_type or schema_type,
            )

        return RegisteredSchema(
            id=found.id,
            definition=found.definition or schema,
            schema_type=found.schema_type or schema_type,
        )

    def encode_for_id(
        self,
        schema_id: int,
        message: Any,
        schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
    ) -> bytes:
        """
        Encode a message with the schema registered under an id.

        Args:
            schema_id: Id of the schema.
            message: Message in whatever form the schema type's handler accepts.
            schema_type: Expected schema type, checked against the registry.

        Returns:
            Framed, encoded message.

        Raises:
            NoSchemaHandlerError: If no handler is registered for schema_type.
            SchemaTypeMismatchError: If the registry records another type.
        """
        schema_type = SchemaType(schema_type)
        if schema_type not in self.schema_handlers:
            raise NoSchemaHandlerError(schema_type)

        registered = self.schema_registry_client.get_schema_by_id(schema_id)
        registry_type = registered.schema_type or DEFAULT_SCHEMA_TYPE
        if schema_type != registry_type:
            raise SchemaTypeMismatchError(schema_type, registry_type)

        return self._encode_message(schema_id, message, registry_type, registered.definition)

    def encode_for_subject(
        self,
        subject: str,
        message: Any,
        schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
        schema: str | None = None,
        references: References | None = None,
    ) -> bytes:
        """
        Encode a message for a subject.

        Args:
            subject: Subject name (don't forget the -key/-value suffix for topics).
            message: Message in whatever form the schema type's handler accepts.
            schema_type: Schema type.
            schema: Serialized schema, registered if the registry doesn't know
                it yet. The subject's latest schema is used if omitted or empty.
            references: Schemas ``schema`` references.

        Returns:
            Framed, encoded message.

        Raises:
            NoSchemaHandlerError: If no handler is registered for schema_type.
            SchemaTypeMismatchError: If the resolved schema has another type.
        """
        schema_type = SchemaType(schema_type)
        if schema_type not in self.schema_handlers:
            raise NoSchemaHandlerError(schema_type)

        registered = self.ensure_schema_registered(subject, schema_type, schema, references)
        if schema_type != registered.schema_type:
            raise SchemaTypeMismatchError(schema_type, registered.schema_type)

        return self._encode_message(
            registered.id, message, registered.schema_type, registered.definition
        )

    def decode(self, data: bytes) -> Any:
        """
        Decode a message.

        Args:
            data: Message with or without schema preamble.

        Returns:
            The decoded message, or ``data`` unchanged if it carries no
            preamble.

        Raises:
            NoSchemaHandlerError: If no handler is registered for the
                schema's type.
        """
        framed = unframe(data)
        if framed.schema_id is None:
            return framed.payload
        return self._decode_payload(framed.schema_id, framed.payload)

    def decode_with_subject_and_version_information(self, data: bytes) -> DecodedMessage:
        """
        Decode a message and list the subjects its schema is registered under.

        ``subjects`` is None for messages without preamble.
        """
        framed = unframe(data)
        if framed.schema_id is None:
            return DecodedMessage(message=framed.payload)

        message = self._decode_payload(framed.schema_id, framed.payload)
        subjects = self.schema_registry_client.list_versions_for_id(framed.schema_id)
        return DecodedMessage(message=message, subjects=subjects)

    def _decode_payload(self, schema_id: int, payload: bytes) -> Any:
        registered = self.schema_registry_client.get_schema_by_id(schema_id)
        schema_type = registered.schema_type or DEFAULT_SCHEMA_TYPE
        factory = self.schema_handlers.get(schema_type)
        if factory is None:
            raise NoSchemaHandlerError(schema_type)
        return factory(registered.definition).decode(payload)

    def _encode_message(
        self,
        schema_id: int,
        message: Any,
        schema_type: SchemaType,
        schema: str,
    ) -> bytes:
        handler = self.schema_handlers[schema_type](schema)
        return frame(schema_id, handler.encode(message))
