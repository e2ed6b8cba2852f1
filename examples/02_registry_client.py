#!/usr/bin/env python3
"""
02_registry_client.py - Schema Registry Administration

This example demonstrates:
- Listing subjects and versions
- Checking compatibility before registering a new version
- Reading and changing compatibility modes
- Handling registry errors

Prerequisites:
    - Schema registry running on localhost:8081
    - pyschematic installed

Run with:
    python 02_registry_client.py
"""

import json

from pyschematic import CompatibilityMode, RegistryError, SchemaRegistryClient

V1 = json.dumps({"type": "record", "name": "User", "fields": [{"name": "id", "type": "long"}]})
V2 = json.dumps(
    {
        "type": "record",
        "name": "User",
        "fields": [
            {"name": "id", "type": "long"},
            {"name": "email", "type": ["null", "string"], "default": None},
        ],
    }
)


def main():
    print("Registry Client")
    print("-" * 50)

    with SchemaRegistryClient("http://localhost:8081") as client:
        print(f"Supported types: {client.get_schema_types()}")
        print(f"Default compatibility: {client.get_config().value}")

        client.register_schema("users-value", V1)
        client.set_subject_config("users-value", CompatibilityMode.BACKWARD)

        if client.test_compatibility("users-value", V2):
            registered = client.register_schema("users-value", V2)
            print(f"✓ Registered v2 with id {registered.id}")

        print(f"Versions: {client.list_versions_for_subject('users-value')}")

        try:
            client.get_schema_for_subject_and_version("users-value", 99)
        except RegistryError as e:
            print(f"✓ Caught registry error {e.code} (raw {e.raw_code}): {e.registry_message}")


if __name__ == "__main__":
    main()
