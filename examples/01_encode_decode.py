#!/usr/bin/env python3
"""
01_encode_decode.py - Encoding and Decoding with the Schema Registry

This example demonstrates:
- Registering a handler factory per schema type
- Encoding for a subject (the schema is registered on first use)
- Encoding for a known schema id
- Decoding framed messages and passing through plain ones

Prerequisites:
    - Schema registry running on localhost:8081
    - pyschematic installed with the avro extra (pip install pyschematic[avro])

Run with:
    python 01_encode_decode.py
"""

import json

from pyschematic import SchemaRegistryHelper, SchemaType, avro_handler, json_handler

GREETING_SCHEMA = json.dumps(
    {
        "type": "record",
        "name": "Greeting",
        "fields": [{"name": "hello", "type": "string"}],
    }
)


def main():
    print("Encode and Decode")
    print("-" * 50)

    with (
        SchemaRegistryHelper("http://localhost:8081")
        .with_schema_handler(SchemaType.AVRO, avro_handler)
        .with_schema_handler(SchemaType.JSON, json_handler)
    ) as helper:
        raw = helper.encode_for_subject(
            "greetings-value", {"hello": "world"}, schema=GREETING_SCHEMA
        )
        schema_id = int.from_bytes(raw[1:5], "big")
        print(f"✓ Encoded {len(raw)} bytes with schema id {schema_id}")

        again = helper.encode_for_id(schema_id, {"hello": "again"})
        print(f"✓ Encoded for id {schema_id}: {again.hex()}")

        print(f"✓ Decoded: {helper.decode(raw)}")

        info = helper.decode_with_subject_and_version_information(raw)
        for sv in info.subjects or []:
            print(f"  registered under {sv.subject} v{sv.version}")

        print(f"✓ Plain bytes pass through: {helper.decode(b'not framed')!r}")


if __name__ == "__main__":
    main()
