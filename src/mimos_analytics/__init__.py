"""mimos-analytics - best-effort telemetry clients for the Mimos analytics service.

Features:
- Backend client for tool call and tool error events
- Frontend client for UI events with session and screen tracking
- Tool call tracker that times async operations and reports them in the background

Delivery is fire-and-forget: failures are logged, never raised.

Usage:
    from mimos_analytics import AnalyticsClient, AnalyticsConfig, ToolCallTracker

    analytics = AnalyticsClient(AnalyticsConfig(base_url=..., project_id=..., api_key=...))
    tracker = ToolCallTracker(analytics)
    result = await tracker.track("search", lambda: search(query))
"""

from importlib.metadata import version

from mimos_analytics.client import AnalyticsClient
from mimos_analytics.config import AnalyticsConfig, FrontendConfig, load_config
from mimos_analytics.errors import ErrorInfo, infer_error_type
from mimos_analytics.frontend import FrontendAnalyticsClient
from mimos_analytics.models import (
    AppLoadErrorPayload,
    AppLoadSuccessPayload,
    ButtonClickPayload,
    ElementFocusPayload,
    FrontendEventType,
    MetricsRequest,
    MotionScrollPayload,
    MotionSwipePayload,
    SessionEndPayload,
    SessionStartPayload,
    ToolCallPayload,
    ToolCallStatus,
    ToolErrorPayload,
    ToolErrorType,
)
from mimos_analytics.tracker import ToolCallTracker, TrackedCallResult

__version__ = version("mimos-analytics")

__all__ = [
    "AnalyticsClient",
    "AnalyticsConfig",
    "AppLoadErrorPayload",
    "AppLoadSuccessPayload",
    "ButtonClickPayload",
    "ElementFocusPayload",
    "ErrorInfo",
    "FrontendAnalyticsClient",
    "FrontendConfig",
    "FrontendEventType",
    "MetricsRequest",
    "MotionScrollPayload",
    "MotionSwipePayload",
    "SessionEndPayload",
    "SessionStartPayload",
    "ToolCallPayload",
    "ToolCallStatus",
    "ToolCallTracker",
    "ToolErrorPayload",
    "ToolErrorType",
    "TrackedCallResult",
    "__version__",
    "infer_error_type",
    "load_config",
]
