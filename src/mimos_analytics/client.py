"""Backend analytics client for tool call telemetry.

Sends tool_call and tool_error events to the analytics service. The client
is stateless apart from its configuration; every method is safe to call
concurrently and none of them raises on delivery failure.

Usage:
    from mimos_analytics import AnalyticsClient, AnalyticsConfig

    analytics = AnalyticsClient(
        AnalyticsConfig(
            base_url="https://analytics.example.com",
            project_id="my-project",
            api_key="sk-...",
        )
    )

    await analytics.track_success("search_database", 120, call_id="abc")
    await analytics.track_error("search_database", exc, error_type="timeout")
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from mimos_analytics.config import BACKEND_METRICS_PATH, AnalyticsConfig, metrics_url
from mimos_analytics.errors import ErrorInfo
from mimos_analytics.models import (
    BackendEventType,
    Number,
    ToolCallPayload,
    ToolErrorPayload,
    ToolErrorType,
    build_request,
    coerce_payload,
)
from mimos_analytics.transport import post_metric
from mimos_analytics.utils import now_ms

LOG_PREFIX = "[MimosAnalytics]"


class AnalyticsClient:
    """Client for sending tool call metrics to the analytics service."""

    def __init__(
        self,
        config: AnalyticsConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Backend analytics configuration
            transport: Optional httpx transport used for every send
        """
        self.config = config
        self.metrics_url = metrics_url(config.base_url, BACKEND_METRICS_PATH)
        self._transport = transport

    def is_disabled(self) -> bool:
        """Check if analytics is disabled."""
        return self.config.disabled

    async def track_tool_call(self, payload: ToolCallPayload | Mapping[str, Any]) -> None:
        """Send a tool_call metric."""
        if self.config.disabled:
            return
        await self._send("tool_call", coerce_payload(ToolCallPayload, payload))

    async def track_tool_error(self, payload: ToolErrorPayload | Mapping[str, Any]) -> None:
        """Send a tool_error metric."""
        if self.config.disabled:
            return
        await self._send("tool_error", coerce_payload(ToolErrorPayload, payload))

    async def track_success(
        self,
        tool_name: str,
        duration_ms: Number,
        *,
        call_id: str | None = None,
        parameters: str | None = None,
        response_size_bytes: int | None = None,
    ) -> None:
        """Track a successful tool call.

        Args:
            tool_name: Name of the tool
            duration_ms: Execution time in milliseconds
            call_id: Optional correlation identifier
            parameters: Tool parameters as a JSON string
            response_size_bytes: Size of the serialized response
        """
        await self.track_tool_call(
            ToolCallPayload(
                tool_name=tool_name,
                duration_ms=duration_ms,
                status="success",
                timestamp_ms=now_ms(),
                call_id=call_id,
                parameters=parameters,
                response_size_bytes=response_size_bytes,
            )
        )

    async def track_error(
        self,
        tool_name: str,
        error: BaseException | str,
        *,
        call_id: str | None = None,
        parameters: str | None = None,
        error_type: ToolErrorType | None = None,
        error_code: str | None = None,
    ) -> None:
        """Track a failed tool call.

        The error code defaults to the exception's class name ("Error" for
        a plain string) and the error type to "unknown".

        Args:
            tool_name: Name of the tool
            error: Exception raised by the tool, or an error message
            call_id: Optional correlation identifier
            parameters: Tool parameters as a JSON string
            error_type: Error category
            error_code: Explicit error code
        """
        info = ErrorInfo.from_error(error, code=error_code, code_source="class")
        await self.track_tool_error(
            ToolErrorPayload(
                tool_name=tool_name,
                error_code=info.code,
                error_message=info.message,
                error_type=error_type or "unknown",
                timestamp_ms=now_ms(),
                call_id=call_id,
                parameters=parameters,
                stack_trace=info.stack_trace,
            )
        )

    async def _send(self, event_type: BackendEventType, payload: ToolCallPayload | ToolErrorPayload) -> None:
        await post_metric(
            self.metrics_url,
            build_request(event_type, payload),
            headers={
                "Content-Type": "application/json",
                "anon-project-id": self.config.project_id,
                "api-key": self.config.api_key,
            },
            timeout_ms=self.config.timeout_ms,
            log_prefix=LOG_PREFIX,
            span="backend.send",
            transport=self._transport,
        )
