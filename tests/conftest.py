# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""Shared fixtures: an in-process schema registry stand-in."""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from pyschematic import SchemaRegistryClient, SchemaRegistryHelper, SchemaType, avro_handler

REGISTRY_URL = "http://localhost:8081"

GREETING_SCHEMA = json.dumps(
    {
        "type": "record",
        "name": "Greeting",
        "fields": [{"name": "hello", "type": "string"}],
    }
)

Reply = httpx.Response | Callable[[httpx.Request], httpx.Response]


class FakeRegistry:
    """
    Scripted registry responses keyed by method and path.

    Each reply is used once, in the order it was added. Requests without a
    scripted reply fail the test.
    """

    def __init__(self) -> None:
        self._replies: dict[tuple[str, str], list[Reply]] = defaultdict(list)
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def reply(
        self,
        method: str,
        path: str,
        status: int = 200,
        *,
        json: Any = None,
        text: str | None = None,
    ) -> FakeRegistry:
        if text is not None:
            response = httpx.Response(status, text=text)
        elif json is not None:
            response = httpx.Response(status, json=json)
        else:
            response = httpx.Response(status)
        self._replies[(method, path)].append(response)
        return self

    def reply_with(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> FakeRegistry:
        self._replies[(method, path)].append(handler)
        return self

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self._replies.get((request.method, request.url.path))
        if not replies:
            raise AssertionError(f"unexpected request: {request.method} {request.url}")
        reply = replies.pop(0)
        if isinstance(reply, httpx.Response):
            return reply
        return reply(request)


def echo_registration(schema_id: int) -> Callable[[httpx.Request], httpx.Response]:
    """Registration reply that echoes the request body next to the id."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": schema_id, **json.loads(request.content)})

    return handler


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def client(registry: FakeRegistry) -> Iterator[SchemaRegistryClient]:
    c = SchemaRegistryClient(REGISTRY_URL, transport=registry.transport)
    yield c
    c.close()


@pytest.fixture
def helper(registry: FakeRegistry) -> Iterator[SchemaRegistryHelper]:
    h = SchemaRegistryHelper(REGISTRY_URL, transport=registry.transport).with_schema_handler(
        SchemaType.AVRO, avro_handler
    )
    yield h
    h.close()
