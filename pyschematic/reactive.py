# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Reactive Streams support for the pyschematic SDK.

Provides RxPY operators that encode and decode message streams through a
SchemaRegistryHelper, so registry aware serialization composes with other
stream operators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import reactivex as rx
from reactivex import Observable

from .types import DEFAULT_SCHEMA_TYPE, SchemaType

if TYPE_CHECKING:
    from .client import References
    from .registry import SchemaRegistryHelper


def _map_or_error(
    source: Observable[Any],
    fn: Callable[[Any], Any],
) -> Observable[Any]:
    def subscribe(observer: Any, scheduler: Any = None) -> Any:
        def on_next(value: Any) -> None:
            try:
                result = fn(value)
            except Exception as e:
                observer.on_error(e)
                return
            observer.on_next(result)

        return source.subscribe(
            on_next=on_next,
            on_error=observer.on_error,
            on_completed=observer.on_completed,
            scheduler=scheduler,
        )

    return rx.create(subscribe)


def encode_for_subject(
    helper: SchemaRegistryHelper,
    subject: str,
    schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
    schema: Optional[str] = None,
    references: Optional[References] = None,
) -> Callable[[Observable[Any]], Observable[bytes]]:
    """
    Create an operator that encodes each message for a subject.

    Example:
        >>> rx.of({"hello": "world"}).pipe(
        ...     encode_for_subject(helper, "greetings-value", schema=schema),
        ... ).subscribe(on_next=producer.send)

    Returns:
        Operator function for use with pipe(). Registry and handler errors
        terminate the stream through on_error.
    """
    def _encode(source: Observable[Any]) -> Observable[bytes]:
        return _map_or_error(
            source,
            lambda message: helper.encode_for_subject(
                subject, message, schema_type, schema, references
            ),
        )

    return _encode


def encode_for_id(
    helper: SchemaRegistryHelper,
    schema_id: int,
    schema_type: SchemaType | str = DEFAULT_SCHEMA_TYPE,
) -> Callable[[Observable[Any]], Observable[bytes]]:
    """Create an operator that encodes each message with a fixed schema id."""
    def _encode(source: Observable[Any]) -> Observable[bytes]:
        return _map_or_error(
            source,
            lambda message: helper.encode_for_id(schema_id, message, schema_type),
        )

    return _encode


def decode(
    helper: SchemaRegistryHelper,
    with_subjects: bool = False,
) -> Callable[[Observable[bytes]], Observable[Any]]:
    """
    Create an operator that decodes each raw message.

    Args:
        helper: Helper with handlers for the expected schema types.
        with_subjects: Emit DecodedMessage objects carrying the subjects the
            schema is registered under instead of bare messages.

    Returns:
        Operator function for use with pipe().
    """
    def _decode(source: Observable[bytes]) -> Observable[Any]:
        if with_subjects:
            fn: Callable[[bytes], Any] = helper.decode_with_subject_and_version_information
        else:
            fn = helper.decode
        return _map_or_error(source, fn)

    return _decode
