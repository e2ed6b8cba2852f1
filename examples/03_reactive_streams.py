#!/usr/bin/env python3
"""
03_reactive_streams.py - Reactive Encoding Pipelines

This example demonstrates:
- Encoding a stream of messages with an RxPY operator
- Decoding the encoded stream back
- Errors terminating the stream through on_error

Prerequisites:
    - Schema registry running on localhost:8081
    - pyschematic installed with the avro extra

Run with:
    python 03_reactive_streams.py
"""

import json

import reactivex as rx
from reactivex import operators as ops

from pyschematic import SchemaRegistryHelper, SchemaType, avro_handler, reactive

SCHEMA = json.dumps(
    {"type": "record", "name": "Reading", "fields": [{"name": "value", "type": "double"}]}
)


def main():
    print("Reactive Streams")
    print("-" * 50)

    with SchemaRegistryHelper("http://localhost:8081").with_schema_handler(
        SchemaType.AVRO, avro_handler
    ) as helper:
        readings = rx.of(1.5, 2.25, 3.0).pipe(
            ops.map(lambda v: {"value": v}),
            reactive.encode_for_subject(helper, "readings-value", schema=SCHEMA),
            reactive.decode(helper),
        )
        readings.subscribe(
            on_next=lambda msg: print(f"  roundtrip: {msg}"),
            on_error=lambda e: print(f"✗ {e}"),
            on_completed=lambda: print("✓ Stream completed"),
        )


if __name__ == "__main__":
    main()
