"""Tests for best-effort metric delivery."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from mimos_analytics.models import build_request
from mimos_analytics.transport import post_metric

URL = "http://analytics.test/v1/backend-metrics/write/"


async def _post(transport: httpx.AsyncBaseTransport, timeout_ms: int = 5000) -> None:
    await post_metric(
        URL,
        build_request("tool_call", {"tool_name": "t"}),
        headers={"Content-Type": "application/json", "anon-project-id": "p"},
        timeout_ms=timeout_ms,
        log_prefix="[Test]",
        span="test.send",
        transport=transport,
    )


@pytest.mark.unit
@pytest.mark.client
class TestPostMetric:
    """post_metric never raises and logs every failure mode."""

    @pytest.mark.asyncio
    async def test_success_logs_nothing_at_error(self, transport, log_messages) -> None:
        await _post(transport)

        assert len(transport.requests) == 1
        assert json.loads(transport.requests[0].content)["event_type"] == "tool_call"
        assert not any("Failed" in m for m in log_messages)
        assert any("span=test.send" in m and "status=202" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_any_2xx_is_ok(self, make_transport, log_messages) -> None:
        await _post(make_transport(status_code=200, body=""))
        await _post(make_transport(status_code=204, body=""))

        assert not any("Failed" in m for m in log_messages)

    @pytest.mark.asyncio
    async def test_non_ok_status(self, make_transport, log_messages) -> None:
        await _post(make_transport(status_code=401, body='{"error":"bad key"}'))

        assert '[Test] Failed to send metric: 401 {"error":"bad key"}' in log_messages

    @pytest.mark.asyncio
    async def test_transport_error(self, log_messages) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        await _post(httpx.MockTransport(handler))

        assert any(m.startswith("[Test] Failed to send metric: connection refused") for m in log_messages)

    @pytest.mark.asyncio
    async def test_timeout(self, log_messages) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(202)

        await _post(httpx.MockTransport(handler), timeout_ms=20)

        assert "[Test] Request timed out" in log_messages

    @pytest.mark.asyncio
    async def test_httpx_timeout_exception(self, log_messages) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        await _post(httpx.MockTransport(handler))

        assert "[Test] Request timed out" in log_messages
