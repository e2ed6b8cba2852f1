# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Tests for SchemaRegistryHelper."""

import json

import pytest

from pyschematic import (
    DecodedMessage,
    NoSchemaHandlerError,
    RegisteredSchema,
    RegistryConfig,
    RegistryError,
    SchemaReference,
    SchemaRegistryClient,
    SchemaRegistryHelper,
    SchemaType,
    SchemaTypeMismatchError,
    SubjectVersion,
    frame,
    json_handler,
)

from conftest import GREETING_SCHEMA, REGISTRY_URL, FakeRegistry, echo_registration

SUBJECT = "greetings-value"
NOT_FOUND = {"error_code": 40403, "message": "Schema not found"}


class TestDecodePassthrough:
    """Tests for messages without a schema preamble."""

    def test_decode_returns_input(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        raw = "🦆".encode("utf-8")

        assert helper.decode(raw) is raw
        assert registry.requests == []

    def test_decode_with_subjects_returns_input(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        raw = b"plain"
        result = helper.decode_with_subject_and_version_information(raw)

        assert result == DecodedMessage(message=raw, subjects=None)
        assert registry.requests == []


class TestEncodeForSubject:
    """Tests for encode_for_subject and ensure_schema_registered."""

    def test_registers_unknown_schema(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        """Test a 404 lookup leads to registration and a decodable message."""
        registry.reply("POST", f"/subjects/{SUBJECT}", 404, json=NOT_FOUND)
        registry.reply_with("POST", f"/subjects/{SUBJECT}/versions", echo_registration(1))

        raw = helper.encode_for_subject(SUBJECT, {"hello": "world"}, schema=GREETING_SCHEMA)

        assert raw[:5] == b"\x00\x00\x00\x00\x01"
        lookup, registration = registry.requests
        assert json.loads(lookup.content) == {"schema": GREETING_SCHEMA, "schemaType": "AVRO"}
        assert json.loads(registration.content) == {"schema": GREETING_SCHEMA, "schemaType": "AVRO"}

        registry.reply("GET", "/schemas/ids/1", json={"schema": GREETING_SCHEMA})
        assert helper.decode(raw) == {"hello": "world"}

    def test_registration_backfills_from_request(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        """Test an id-only registration answer is completed with the request."""
        registry.reply("POST", f"/subjects/{SUBJECT}", 404, json=NOT_FOUND)
        registry.reply("POST", f"/subjects/{SUBJECT}/versions", json={"id": 4})

        result = helper.ensure_schema_registered(SUBJECT, SchemaType.AVRO, GREETING_SCHEMA)

        assert result == RegisteredSchema(id=4, definition=GREETING_SCHEMA, schema_type=SchemaType.AVRO)

    def test_known_schema_is_not_registered_again(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        registry.reply(
            "POST",
            f"/subjects/{SUBJECT}",
            json={"subject": SUBJECT, "id": 2, "version": 1, "schema": GREETING_SCHEMA},
        )

        first = helper.encode_for_subject(SUBJECT, {"hello": "a"}, schema=GREETING_SCHEMA)
        second = helper.encode_for_subject(SUBJECT, {"hello": "b"}, schema=GREETING_SCHEMA)

        assert first[:5] == second[:5] == frame(2, b"")
        assert len(registry.calls("POST", f"/subjects/{SUBJECT}")) == 1
        assert registry.calls("POST", f"/subjects/{SUBJECT}/versions") == []

    def test_lookup_after_registration_is_cached(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        """Test the failed lookup is not cached but the successful one is."""
        registry.reply("POST", f"/subjects/{SUBJECT}", 404, json=NOT_FOUND)
        registry.reply_with("POST", f"/subjects/{SUBJECT}/versions", echo_registration(1))
        registry.reply("POST", f"/subjects/{SUBJECT}", json={"id": 1, "schema": GREETING_SCHEMA})

        for _ in range(3):
            helper.encode_for_subject(SUBJECT, {"hello": "world"}, schema=GREETING_SCHEMA)

        assert len(registry.calls("POST", f"/subjects/{SUBJECT}")) == 2
        assert len(registry.calls("POST", f"/subjects/{SUBJECT}/versions")) == 1

    def test_registration_is_idempotent(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        """Test registering then finding the same schema yields one id."""
        registry.reply("POST", f"/subjects/{SUBJECT}", 404, json=NOT_FOUND)
        registry.reply_with("POST", f"/subjects/{SUBJECT}/versions", echo_registration(1))
        registry.reply("POST", f"/subjects/{SUBJECT}", json={"id": 1, "version": 1, "schema": GREETING_SCHEMA})

        first = helper.ensure_schema_registered(SUBJECT, SchemaType.AVRO, GREETING_SCHEMA)
        second = helper.ensure_schema_registered(SUBJECT, SchemaType.AVRO, GREETING_SCHEMA)

        assert first.id == second.id == 1
        assert first == second
        assert len(registry.calls("POST", f"/subjects/{SUBJECT}")) == 2
        assert len(registry.calls("POST", f"/subjects/{SUBJECT}/versions")) == 1

    def test_empty_schema_uses_latest_version(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        registry.reply("GET", f"/subjects/{SUBJECT}/versions/latest", json={"id": 7, "schema": '{"type":"string"}'})

        assert helper.encode_for_subject(SUBJECT, "hi", schema="") == b"\x00\x00\x00\x00\x07\x04hi"
        assert registry.calls("POST", f"/subjects/{SUBJECT}") == []

    def test_uses_latest_version_without_schema(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        registry.reply(
            "GET",
            f"/subjects/{SUBJECT}/versions/latest",
            json={"subject": SUBJECT, "id": 7, "version": 3, "schema": '{"type":"string"}'},
        )

        raw = helper.encode_for_subject(SUBJECT, "hi")

        # Avro strings are a zigzag varint length followed by UTF-8 bytes
        assert raw == b"\x00\x00\x00\x00\x07\x04hi"

        registry.reply("GET", "/schemas/ids/7", json={"schema": '{"type":"string"}'})
        assert helper.decode(raw) == "hi"

    def test_latest_version_keeps_registry_type(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        registry.reply(
            "GET",
            f"/subjects/{SUBJECT}/versions/latest",
            json={"id": 3, "schema": "{}", "schemaType": "JSON"},
        )

        result = helper.ensure_schema_registered(SUBJECT)

        assert result == RegisteredSchema(id=3, definition="{}", schema_type=SchemaType.JSON)

    def test_references_are_sent(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("POST", f"/subjects/{SUBJECT}", json={"id": 5, "schema": GREETING_SCHEMA})
        refs = [SchemaReference(name="Common", subject="common-value", version=2)]

        helper.encode_for_subject(SUBJECT, {"hello": "x"}, schema=GREETING_SCHEMA, references=refs)

        body = json.loads(registry.requests[0].content)
        assert body["references"] == [{"name": "Common", "subject": "common-value", "version": 2}]

    def test_missing_handler(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        """Test nothing is sent to the registry without a handler."""
        with pytest.raises(NoSchemaHandlerError, match="PROTOBUF"):
            helper.encode_for_subject(SUBJECT, {"hello": "x"}, SchemaType.PROTOBUF, "syntax = 'proto3';")

        assert registry.requests == []

    def test_type_mismatch(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply(
            "GET",
            f"/subjects/{SUBJECT}/versions/latest",
            json={"id": 3, "schema": "syntax = 'proto3';", "schemaType": "PROTOBUF"},
        )

        with pytest.raises(SchemaTypeMismatchError) as exc_info:
            helper.encode_for_subject(SUBJECT, {"hello": "x"}, SchemaType.AVRO)

        assert exc_info.value.requested == SchemaType.AVRO
        assert exc_info.value.registry == SchemaType.PROTOBUF
        assert "AVRO != PROTOBUF" in str(exc_info.value)

    def test_lookup_error_other_than_not_found(
        self, registry: FakeRegistry, helper: SchemaRegistryHelper
    ) -> None:
        registry.reply("POST", f"/subjects/{SUBJECT}", 500, json={"error_code": 50001, "message": "store error"})

        with pytest.raises(RegistryError) as exc_info:
            helper.encode_for_subject(SUBJECT, {"hello": "x"}, schema=GREETING_SCHEMA)

        assert exc_info.value.code == 50001
        assert registry.calls("POST", f"/subjects/{SUBJECT}/versions") == []

    def test_lookup_body_not_json(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("POST", f"/subjects/{SUBJECT}", 403, text="Forbidden")

        with pytest.raises(json.JSONDecodeError):
            helper.encode_for_subject(SUBJECT, {"hello": "x"}, schema=GREETING_SCHEMA)

    def test_registration_error(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("POST", f"/subjects/{SUBJECT}", 404, json=NOT_FOUND)
        registry.reply(
            "POST",
            f"/subjects/{SUBJECT}/versions",
            409,
            json={"error_code": 409, "message": "Incompatible schema"},
        )

        with pytest.raises(RegistryError) as exc_info:
            helper.encode_for_subject(SUBJECT, {"hello": "x"}, schema=GREETING_SCHEMA)

        assert exc_info.value.code == 409


class TestEncodeForId:
    """Tests for encode_for_id."""

    def test_encode(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/2", json={"schema": "{}", "schemaType": "JSON"})
        helper.with_schema_handler(SchemaType.JSON, json_handler)

        raw = helper.encode_for_id(2, {"a": 1}, SchemaType.JSON)

        assert raw == frame(2, b'{"a": 1}')

    def test_schema_is_fetched_once(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/1", json={"schema": GREETING_SCHEMA})

        helper.encode_for_id(1, {"hello": "a"})
        helper.encode_for_id(1, {"hello": "b"})

        assert len(registry.calls("GET", "/schemas/ids/1")) == 1

    def test_type_mismatch(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        """Test a schema without schemaType counts as AVRO."""
        registry.reply("GET", "/schemas/ids/1", json={"schema": GREETING_SCHEMA})
        helper.with_schema_handler("JSON", json_handler)

        with pytest.raises(SchemaTypeMismatchError, match="JSON != AVRO"):
            helper.encode_for_id(1, {"hello": "x"}, SchemaType.JSON)

    def test_missing_handler(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        with pytest.raises(NoSchemaHandlerError):
            helper.encode_for_id(1, {"hello": "x"}, SchemaType.JSON)

        assert registry.requests == []


class TestDecode:
    """Tests for decode and decode_with_subject_and_version_information."""

    def test_decode_json(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/9", json={"schema": "{}", "schemaType": "JSON"})
        helper.with_schema_handler(SchemaType.JSON, json_handler)

        assert helper.decode(frame(9, b'{"b": [1, 2]}')) == {"b": [1, 2]}

    def test_decode_schema_id_zero(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/0", json={"schema": '{"type":"string"}'})
        assert helper.decode(b"\x00\x00\x00\x00\x00\x04hi") == "hi"

    def test_decode_missing_handler(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/3", json={"schema": "syntax = 'proto3';", "schemaType": "PROTOBUF"})

        with pytest.raises(NoSchemaHandlerError) as exc_info:
            helper.decode(frame(3, b"\x08\x01"))

        assert exc_info.value.schema_type == SchemaType.PROTOBUF

    def test_decode_unknown_schema_type(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        """Test a type this package has no enum member for still reports the missing handler."""
        registry.reply("GET", "/schemas/ids/3", json={"schema": "x", "schemaType": "XML"})

        with pytest.raises(NoSchemaHandlerError, match="protocol XML") as exc_info:
            helper.decode(frame(3, b"abc"))

        assert exc_info.value.schema_type == "XML"

    def test_decode_unknown_id(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/42", 404, json={"error_code": 40403, "message": "Schema not found"})

        with pytest.raises(RegistryError) as exc_info:
            helper.decode(frame(42, b"\x04hi"))

        assert exc_info.value.is_not_found

    def test_decode_with_subjects(self, registry: FakeRegistry, helper: SchemaRegistryHelper) -> None:
        registry.reply("GET", "/schemas/ids/1", json={"schema": GREETING_SCHEMA})
        registry.reply(
            "GET",
            "/schemas/ids/1/versions",
            json=[{"subject": SUBJECT, "version": 1}, {"subject": "archive-value", "version": 4}],
        )

        result = helper.decode_with_subject_and_version_information(frame(1, b"\x0aworld"))

        assert result.message == {"hello": "world"}
        assert result.subjects == [
            SubjectVersion(subject=SUBJECT, version=1),
            SubjectVersion(subject="archive-value", version=4),
        ]


class TestHelperConstruction:
    """Tests for helper construction and handler registration."""

    def test_with_schema_handler_accepts_names(self, helper: SchemaRegistryHelper) -> None:
        assert helper.with_schema_handler("JSON", json_handler) is helper
        assert helper.schema_handlers[SchemaType.JSON] is json_handler

    def test_with_schema_handler_replaces(self, helper: SchemaRegistryHelper) -> None:
        helper.with_schema_handler(SchemaType.AVRO, json_handler)
        assert helper.schema_handlers[SchemaType.AVRO] is json_handler

    def test_unknown_schema_type(self, helper: SchemaRegistryHelper) -> None:
        with pytest.raises(ValueError):
            helper.with_schema_handler("XML", json_handler)

    def test_config_base_url_is_kept(self, registry: FakeRegistry) -> None:
        config = RegistryConfig(base_url="https://registry.example:8081")
        with SchemaRegistryHelper(config=config, transport=registry.transport) as helper:
            assert helper.schema_registry_client.base_url.host == "registry.example"

    def test_existing_client(self, registry: FakeRegistry) -> None:
        client = SchemaRegistryClient(REGISTRY_URL, transport=registry.transport)
        with SchemaRegistryHelper(client=client) as helper:
            assert helper.schema_registry_client.client is client

            registry.reply("GET", "/subjects", json=[SUBJECT])
            assert helper.schema_registry_client.list_subjects() == [SUBJECT]
