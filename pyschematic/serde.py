# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Topic level serializers backed by the schema registry.

Kafka style clients serialize with ``(topic, data)`` callables. These classes
map a topic onto the conventional subject name (``<topic>-value`` or
``<topic>-key``) and delegate to a SchemaRegistryHelper.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from .types import DEFAULT_SCHEMA_TYPE, SchemaType

if TYPE_CHECKING:
    from .client import References
    from .registry import SchemaRegistryHelper


def topic_subject(topic: str, is_key: bool = False) -> str:
    """Subject name for a topic's keys or values."""
    return f"{topic}-{'key' if is_key else 'value'}"


class Serializer(ABC):
    """Turns a topic message into bytes, or None for tombstones."""

    @abstractmethod
    def serialize(self, topic: str, data: Any) -> Optional[bytes]:
        pass


class Deserializer(ABC):
    """Turns bytes read from a topic back into a message."""

    @abstractmethod
    def deserialize(self, topic: str, data: Optional[bytes]) -> Any:
        pass


class RegistrySerializer(Serializer):
    """
    Serialize messages for a topic with the topic's registered schema.

    If a schema is given it is registered on first use; otherwise the
    subject's latest schema is used.
    """

    def __init__(
        self,
        helper: SchemaRegistryHelper,
        schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
        schema: Optional[str] = None,
        references: Optional[References] = None,
        is_key: bool = False,
    ) -> None:
        self._helper = helper
        self._schema_type = SchemaType(schema_type)
        self._schema = schema
        self._references = references
        self._is_key = is_key

    def serialize(self, topic: str, data: Any) -> Optional[bytes]:
        if data is None:
            return None
        return self._helper.encode_for_subject(
            topic_subject(topic, self._is_key),
            data,
            self._schema_type,
            self._schema,
            self._references,
        )


class RegistryDeserializer(Deserializer):
    """Deserialize messages framed with a schema id; others pass through."""

    def __init__(self, helper: SchemaRegistryHelper) -> None:
        self._helper = helper

    def deserialize(self, topic: str, data: Optional[bytes]) -> Any:
        if data is None:
            return None
        return self._helper.decode(data)
