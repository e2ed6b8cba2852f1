# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Schema registry wire format.

Message Format:
    +-------+-------+-------+-------+-------+----------------------+
    | Magic | Schema id (4 bytes, big-endian)| Payload (N bytes)    |
    +-------+-------+-------+-------+-------+----------------------+

Fields:
    - Magic (1 byte): 0x00 - Marks a schema registry framed message
    - Schema id (4 bytes): Registry-assigned schema id (big-endian)
    - Payload: Bytes produced by the schema type's encoder

Anything that does not start with the magic byte (or is too short to hold the
preamble) is not framed and is passed through untouched.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .exceptions import InvalidPayloadError, InvalidSchemaIdError

# Wire format constants
MAGIC_BYTE: int = 0x00
PREAMBLE_SIZE: int = 5
MAX_SCHEMA_ID: int = 0xFFFFFFFF

_PREAMBLE = struct.Struct(">BI")  # Big-endian: unsigned char + unsigned int


@dataclass(frozen=True)
class FramedMessage:
    """Result of splitting a raw message into schema id and payload."""

    schema_id: int | None
    payload: bytes

    @property
    def is_framed(self) -> bool:
        """True if the raw message carried a schema preamble."""
        return self.schema_id is not None


def frame(schema_id: int, payload: bytes) -> bytes:
    """
    Prefix an encoded payload with the schema preamble.

    Args:
        schema_id: Registry id of the schema the payload was encoded with.
        payload: Already encoded message.

    Returns:
        Preamble followed by the payload.

    Raises:
        InvalidPayloadError: If payload is not a byte buffer.
        InvalidSchemaIdError: If schema_id does not fit in 4 unsigned bytes.
    """
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise InvalidPayloadError(payload)
    if isinstance(schema_id, bool) or not isinstance(schema_id, int):
        raise InvalidSchemaIdError(schema_id)
    if not 0 <= schema_id <= MAX_SCHEMA_ID:
        raise InvalidSchemaIdError(schema_id)

    return _PREAMBLE.pack(MAGIC_BYTE, schema_id) + bytes(payload)


def unframe(raw: bytes) -> FramedMessage:
    """
    Split a raw message into schema id and payload.

    Args:
        raw: Message as read from the topic.

    Returns:
        FramedMessage with the schema id, or with ``schema_id=None`` and the
        unchanged input when the message has no preamble.
    """
    if len(raw) < PREAMBLE_SIZE or raw[0] != MAGIC_BYTE:
        return FramedMessage(schema_id=None, payload=raw)

    _, schema_id = _PREAMBLE.unpack_from(raw, 0)
    return FramedMessage(schema_id=schema_id, payload=bytes(raw[PREAMBLE_SIZE:]))
