"""Frontend analytics client for UI telemetry.

Tracks user interaction, session and screen load events. The client keeps
one session at a time together with a screen history and an event counter,
which feed the session_end summary.

Session state is plain instance state. Counters and history change before
the first await in every method. end_session clears the session only after
session_end has been sent, so get_session_id() still returns it while the
send is in flight.

Usage:
    analytics = FrontendAnalyticsClient(
        FrontendConfig(base_url="https://analytics.example.com", project_id="app")
    )

    session_id = await analytics.start_session(
        {"device_type": "mobile", "os_name": "ios", "os_version": "17.0", "app_version": "1.0.0"}
    )
    await analytics.track_button_click("submit-btn", "checkout-screen")
    await analytics.end_session("user_exit")
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

import httpx
from loguru import logger

from mimos_analytics.config import FRONTEND_METRICS_PATH, FrontendConfig, metrics_url
from mimos_analytics.errors import ErrorInfo
from mimos_analytics.models import (
    AppLoadErrorPayload,
    AppLoadSuccessPayload,
    ButtonClickPayload,
    ElementFocusPayload,
    ExitReason,
    FrontendEventType,
    LoadErrorType,
    MotionScrollPayload,
    MotionSwipePayload,
    NetworkType,
    Number,
    Payload,
    SessionEndPayload,
    SessionStartPayload,
    build_request,
    coerce_payload,
)
from mimos_analytics.transport import post_metric
from mimos_analytics.utils import generate_id, now_ms

LOG_PREFIX = "[MimosFrontendAnalytics]"


class FrontendAnalyticsClient:
    """Client for sending frontend metrics to the analytics service."""

    def __init__(
        self,
        config: FrontendConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.metrics_url = metrics_url(config.base_url, FRONTEND_METRICS_PATH)
        self._transport = transport

        self._session_id: str | None = None
        self._session_start: float | None = None
        self._screen_history: list[str] = []
        self._event_count = 0

    def is_disabled(self) -> bool:
        """Check if analytics is disabled."""
        return self.config.disabled

    @property
    def screen_history(self) -> tuple[str, ...]:
        return tuple(self._screen_history)

    @property
    def event_count(self) -> int:
        return self._event_count

    # ==================== Session Management ====================

    async def start_session(self, payload: SessionStartPayload | Mapping[str, Any]) -> str:
        """Start a new session. Call this when the app launches or the user logs in.

        Resets the screen history and event counter. The session id is
        taken from the payload if set, otherwise generated.

        Args:
            payload: Device and app details for the session_start event

        Returns:
            The session id
        """
        start = coerce_payload(SessionStartPayload, payload)
        session_id = start.session_id or generate_id()

        self._session_id = session_id
        self._session_start = time.monotonic()
        self._screen_history = []
        self._event_count = 0

        await self._send("session_start", start.model_copy(update={"session_id": session_id}))
        return session_id

    async def end_session(self, exit_reason: ExitReason) -> None:
        """End the current session. Call this when the app closes or the user logs out.

        Without an active session this only logs a warning. The session is
        cleared once session_end has been sent.

        Args:
            exit_reason: Why the session ended

        Raises:
            ValidationError: If exit_reason is not a known reason. Nothing is
                sent and the session stays active.
        """
        if self._session_id is None or self._session_start is None:
            logger.warning(f"{LOG_PREFIX} No active session to end")
            return

        payload = SessionEndPayload(
            session_id=self._session_id,
            session_duration_ms=int((time.monotonic() - self._session_start) * 1000),
            exit_reason=exit_reason,
            screens_visited=len(self._screen_history),
            total_events=self._event_count,
            last_screen=self._screen_history[-1] if self._screen_history else None,
        )

        await self._send("session_end", payload)

        self._session_id = None
        self._session_start = None

    def get_session_id(self) -> str | None:
        """Get the current session id, or None when no session is active."""
        return self._session_id

    # ==================== User Interaction Events ====================

    async def track_button_click(
        self,
        button_id: str,
        screen_name: str,
        *,
        button_text: str | None = None,
        x: float | None = None,
        y: float | None = None,
    ) -> None:
        """Track a button click."""
        await self.send_button_click(
            ButtonClickPayload(
                button_id=button_id,
                screen_name=screen_name,
                button_text=button_text,
                x_position=x,
                y_position=y,
                timestamp_ms=now_ms(),
            )
        )

    async def track_swipe(self, payload: MotionSwipePayload | Mapping[str, Any]) -> None:
        """Track a swipe gesture."""
        await self._track("motion_swipe", coerce_payload(MotionSwipePayload, payload))

    async def track_scroll(self, payload: MotionScrollPayload | Mapping[str, Any]) -> None:
        """Track a scroll event."""
        await self._track("motion_scroll", coerce_payload(MotionScrollPayload, payload))

    async def track_element_focus(self, payload: ElementFocusPayload | Mapping[str, Any]) -> None:
        """Track element focus (form field interaction)."""
        await self._track("element_focus", coerce_payload(ElementFocusPayload, payload))

    # ==================== Screen Load Events ====================

    async def track_load_success(
        self,
        screen_name: str,
        load_time_ms: Number,
        *,
        is_cold_start: bool = False,
        network_type: NetworkType | None = None,
        ttfb_ms: Number | None = None,
        resource_count: int | None = None,
        cache_hit: bool | None = None,
    ) -> None:
        """Track a successful page/screen load."""
        await self.send_app_load_success(
            AppLoadSuccessPayload(
                screen_name=screen_name,
                load_time_ms=load_time_ms,
                is_cold_start=is_cold_start,
                network_type=network_type,
                ttfb_ms=ttfb_ms,
                resource_count=resource_count,
                cache_hit=cache_hit,
            )
        )

    async def track_load_error(
        self,
        screen_name: str,
        error: BaseException | str,
        *,
        error_type: LoadErrorType | None = None,
        error_code: str | None = None,
        http_status: int | None = None,
        retry_count: int | None = None,
    ) -> None:
        """Track a failed page/screen load.

        The error code defaults to the exception's ``name`` attribute when it
        has one, else its class name ("Error" for a plain string).
        """
        info = ErrorInfo.from_error(error, code=error_code, code_source="name")
        await self.send_app_load_error(
            AppLoadErrorPayload(
                screen_name=screen_name,
                error_code=info.code,
                error_message=info.message,
                error_type=error_type or "unknown",
                http_status=http_status,
                retry_count=retry_count,
                stack_trace=info.stack_trace,
            )
        )

    # ==================== Raw Event Sending ====================

    async def send_button_click(self, payload: ButtonClickPayload | Mapping[str, Any]) -> None:
        """Send a caller-built button_click event."""
        await self._track("button_click", coerce_payload(ButtonClickPayload, payload))

    async def send_session_start(self, payload: SessionStartPayload | Mapping[str, Any]) -> None:
        """Send a caller-built session_start event without touching session state."""
        await self._send("session_start", coerce_payload(SessionStartPayload, payload))

    async def send_session_end(self, payload: SessionEndPayload | Mapping[str, Any]) -> None:
        """Send a caller-built session_end event without touching session state."""
        await self._send("session_end", coerce_payload(SessionEndPayload, payload))

    async def send_app_load_success(
        self, payload: AppLoadSuccessPayload | Mapping[str, Any]
    ) -> None:
        """Send a caller-built app_load_success event."""
        await self._track("app_load_success", coerce_payload(AppLoadSuccessPayload, payload))

    async def send_app_load_error(self, payload: AppLoadErrorPayload | Mapping[str, Any]) -> None:
        """Send a caller-built app_load_error event."""
        await self._track("app_load_error", coerce_payload(AppLoadErrorPayload, payload))

    # ==================== Internals ====================

    def _update_screen_history(self, screen_name: str) -> None:
        # Consecutive repeats collapse; non-adjacent revisits are kept
        if not self._screen_history or self._screen_history[-1] != screen_name:
            self._screen_history.append(screen_name)

    async def _track(self, event_type: FrontendEventType, payload: Payload) -> None:
        """Count the event and record its screen before sending."""
        self._event_count += 1
        self._update_screen_history(payload.screen_name)  # type: ignore[attr-defined]
        await self._send(event_type, payload)

    async def _send(self, event_type: FrontendEventType, payload: Payload) -> None:
        if self.config.disabled:
            return

        await post_metric(
            self.metrics_url,
            build_request(event_type, payload),
            headers={
                "Content-Type": "application/json",
                "anon-project-id": self.config.project_id,
            },
            timeout_ms=self.config.timeout_ms,
            log_prefix=LOG_PREFIX,
            span="frontend.send",
            transport=self._transport,
        )
