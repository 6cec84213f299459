"""Wire models - Pydantic models for event payloads and the metrics envelope.

Every event is sent as a MetricsRequest whose ``metric_value`` is the
JSON-encoded payload string (not a nested object). Unset optional fields
are omitted from that string.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

ToolCallStatus = Literal["success", "error"]

ToolErrorType = Literal[
    "validation",
    "timeout",
    "internal",
    "external",
    "rate_limit",
    "unknown",
]

BackendEventType = Literal["tool_call", "tool_error"]

FrontendEventType = Literal[
    "button_click",
    "motion_swipe",
    "motion_scroll",
    "session_start",
    "session_end",
    "element_focus",
    "app_load_success",
    "app_load_error",
]

DeviceType = Literal["mobile", "tablet", "desktop"]
OsName = Literal["ios", "android", "web"]
ExitReason = Literal["user_exit", "background", "timeout", "crash", "logout"]
ElementType = Literal["text_input", "dropdown", "checkbox", "radio", "textarea", "search"]
NetworkType = Literal["wifi", "cellular", "offline", "unknown"]
LoadErrorType = Literal["network", "timeout", "server", "parse", "unknown"]

# Numeric measurements keep the caller's int or float type on the wire
Number = int | float


class Payload(BaseModel):
    """Base for event payloads; unknown keys are passed through verbatim."""

    model_config = ConfigDict(extra="allow")


# ==================== Backend Payloads ====================


class ToolCallPayload(Payload):
    """Payload for tool_call events."""

    tool_name: str = Field(description="Name of the tool being called")
    call_id: str | None = Field(default=None, description="Correlation identifier")
    duration_ms: Number = Field(description="Duration of the call in milliseconds")
    status: ToolCallStatus = Field(description="Outcome of the call")
    parameters: str | None = Field(
        default=None, description="Raw parameters passed to the tool (JSON string)"
    )
    response_size_bytes: int | None = Field(
        default=None, description="Size of the serialized response"
    )
    timestamp_ms: Number = Field(description="Unix timestamp in milliseconds")


class ToolErrorPayload(Payload):
    """Payload for tool_error events."""

    tool_name: str = Field(description="Name of the tool that failed")
    call_id: str | None = Field(default=None, description="Correlation identifier")
    error_code: str = Field(description="Error code or type name")
    error_message: str = Field(description="Human-readable error message")
    error_type: ToolErrorType = Field(description="Category of the error")
    parameters: str | None = Field(
        default=None, description="Raw parameters that caused the error (JSON string)"
    )
    stack_trace: str | None = Field(default=None, description="Stack trace if available")
    timestamp_ms: Number = Field(description="Unix timestamp in milliseconds")


# ==================== Frontend Payloads ====================


class ButtonClickPayload(Payload):
    button_id: str
    button_text: str | None = None
    screen_name: str
    x_position: Number | None = None
    y_position: Number | None = None
    timestamp_ms: Number


class MotionSwipePayload(Payload):
    direction: Literal["up", "down", "left", "right"]
    start_x: Number
    start_y: Number
    end_x: Number
    end_y: Number
    velocity: Number | None = None
    duration_ms: Number
    screen_name: str


class MotionScrollPayload(Payload):
    direction: Literal["up", "down"]
    scroll_depth_px: Number
    scroll_depth_percent: Number | None = None
    start_position: Number
    end_position: Number
    duration_ms: Number
    screen_name: str


class SessionStartPayload(Payload):
    """Payload for session_start events.

    ``session_id`` may be left unset when passed to
    ``FrontendAnalyticsClient.start_session``, which generates one.
    """

    session_id: str | None = None
    device_type: DeviceType
    os_name: OsName
    os_version: str
    app_version: str
    device_model: str | None = None
    screen_width: int | None = None
    screen_height: int | None = None
    locale: str | None = None
    timezone: str | None = None


class SessionEndPayload(Payload):
    session_id: str
    session_duration_ms: Number
    exit_reason: ExitReason
    screens_visited: int
    total_events: int | None = None
    last_screen: str | None = None


class ElementFocusPayload(Payload):
    element_id: str
    element_type: ElementType
    screen_name: str
    focus_duration_ms: Number
    had_interaction: bool
    field_name: str | None = None


class AppLoadSuccessPayload(Payload):
    screen_name: str
    load_time_ms: Number
    is_cold_start: bool = False
    network_type: NetworkType | None = None
    ttfb_ms: Number | None = None
    resource_count: int | None = None
    cache_hit: bool | None = None


class AppLoadErrorPayload(Payload):
    screen_name: str
    error_code: str
    error_message: str
    error_type: LoadErrorType = "unknown"
    http_status: int | None = None
    retry_count: int | None = None
    stack_trace: str | None = None


# ==================== Envelope ====================


class MetricsRequest(BaseModel):
    """Outer request body: event type plus the JSON-string-encoded payload."""

    event_type: str = Field(description="Event kind, e.g. tool_call or button_click")
    metric_value: str = Field(description="JSON string of the event payload")


P = TypeVar("P", bound=Payload)


def coerce_payload(model_class: type[P], payload: P | Mapping[str, Any]) -> P:
    """Accept either a payload model or a plain mapping of its fields.

    Raises:
        pydantic.ValidationError: If a mapping doesn't match the model
    """
    if isinstance(payload, model_class):
        return payload
    return model_class.model_validate(payload)


def encode_payload(payload: BaseModel | Mapping[str, Any]) -> str:
    """Encode a payload as the compact JSON string carried in metric_value.

    Fields whose value is None are omitted.
    """
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode="json", exclude_none=True)
    else:
        data = {k: v for k, v in payload.items() if v is not None}
    return json.dumps(data, separators=(",", ":"))


def build_request(event_type: str, payload: BaseModel | Mapping[str, Any]) -> MetricsRequest:
    """Wrap a payload in the metrics envelope."""
    return MetricsRequest(event_type=event_type, metric_value=encode_payload(payload))
