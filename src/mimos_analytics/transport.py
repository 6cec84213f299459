"""Best-effort delivery of metrics to the analytics service.

post_metric() is the only place that touches the network. It never raises:
non-2xx responses, transport errors and timeouts are logged and dropped,
so analytics can never break the calling application.
"""

from __future__ import annotations

import asyncio

import httpx
from loguru import logger

from mimos_analytics.logging import LogSpan
from mimos_analytics.models import MetricsRequest


async def post_metric(
    url: str,
    request: MetricsRequest,
    *,
    headers: dict[str, str],
    timeout_ms: int,
    log_prefix: str,
    span: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """POST one metrics envelope, logging any failure.

    A fresh AsyncClient is used per call. The whole attempt, including
    reading an error body, is bounded by ``timeout_ms``.

    Args:
        url: Full metrics endpoint URL
        request: Envelope to send as the JSON body
        headers: Request headers (content type, project id, api key)
        timeout_ms: Deadline for the attempt in milliseconds
        log_prefix: Prefix for log messages, e.g. "[MimosAnalytics]"
        span: LogSpan name, e.g. "backend.send"
        transport: Optional httpx transport (tests, custom deployments)
    """
    timeout = timeout_ms / 1000

    with LogSpan(span=span, event_type=request.event_type) as s:
        try:
            async with asyncio.timeout(timeout):
                async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                    response = await client.post(
                        url,
                        content=request.model_dump_json(),
                        headers=headers,
                    )
            s.add("status", response.status_code)

            if not response.is_success:
                logger.error(
                    f"{log_prefix} Failed to send metric: {response.status_code} {response.text}"
                )

        except (TimeoutError, httpx.TimeoutException):
            s.add("error", "timeout")
            logger.error(f"{log_prefix} Request timed out")

        except Exception as e:
            s.add("error", str(e))
            logger.error(f"{log_prefix} Failed to send metric: {e}")
