"""Shared fixtures: a recording HTTP transport and a loguru capture sink."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from loguru import logger


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request and answers with a fixed status."""

    def __init__(self, status_code: int = 202, body: str = '{"status":"accepted"}') -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = status_code
        self.body = body
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    def bodies(self) -> list[dict[str, Any]]:
        """Decoded outer request bodies."""
        return [json.loads(r.content) for r in self.requests]

    def payloads(self) -> list[dict[str, Any]]:
        """Decoded inner payloads (metric_value strings)."""
        return [json.loads(body["metric_value"]) for body in self.bodies()]

    def event_types(self) -> list[str]:
        return [body["event_type"] for body in self.bodies()]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def make_transport():
    """Factory for transports with a custom status code or body."""
    return RecordingTransport
