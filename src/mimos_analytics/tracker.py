"""Automatic timing and outcome reporting for tool calls.

ToolCallTracker runs an async operation, measures it, and reports success
or failure through an AnalyticsClient. Reports are fire-and-forget: they
run as background tasks that the caller never waits on, and their failures
are discarded. The operation's own result or exception always reaches the
caller unchanged.

Usage:
    tracker = ToolCallTracker(analytics)

    result = await tracker.track(
        "search_database",
        lambda: database.search(query),
        parameters={"query": query},
    )

    tracked_search = tracker.wrap("search_database", database.search)
    result = await tracked_search({"query": "test"})
"""

from __future__ import annotations

import asyncio
import functools
import json
import time
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import Any, Generic, ParamSpec, TypeVar

from loguru import logger
from pydantic import BaseModel

from mimos_analytics.client import AnalyticsClient
from mimos_analytics.errors import infer_error_type
from mimos_analytics.models import ToolErrorType
from mimos_analytics.utils import generate_id

T = TypeVar("T")
P = ParamSpec("P")


@dataclass
class TrackedCallResult(Generic[T]):
    """Result of a tracked call with its timing and correlation id."""

    result: T
    duration_ms: int
    call_id: str


def _encode_parameters(parameters: Any) -> str | None:
    if parameters is None:
        return None
    try:
        return json.dumps(parameters, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.debug(f"Tool parameters not serializable, skipping: {e}")
        return None


def _response_size(result: Any) -> int | None:
    """Length of the JSON-serialized result, or None if not serializable.

    Counts characters of the JSON text, not encoded bytes.
    """
    if result is None:
        return None
    try:
        if isinstance(result, BaseModel):
            return len(result.model_dump_json())
        return len(json.dumps(result, separators=(",", ":"), ensure_ascii=False))
    except (TypeError, ValueError):
        return None


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class ToolCallTracker:
    """Wraps tool executions with timing and automatic success/error reporting."""

    def __init__(self, analytics: AnalyticsClient) -> None:
        self.analytics = analytics
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending_reports(self) -> int:
        """Number of reports still in flight."""
        return len(self._pending)

    async def track(
        self,
        tool_name: str,
        operation: Callable[[], Awaitable[T]],
        *,
        call_id: str | None = None,
        parameters: Any = None,
        error_type: ToolErrorType | None = None,
    ) -> T:
        """Run an operation and report its outcome.

        Args:
            tool_name: Name of the tool being called
            operation: Zero-argument callable returning an awaitable
            call_id: Correlation id (generated if not provided)
            parameters: Tool parameters, JSON-encoded for the report
            error_type: Error category to report instead of inferring one

        Returns:
            The operation's result, unchanged

        Raises:
            Exception: Whatever the operation raised, unchanged
        """
        tracked = await self.track_with_metadata(
            tool_name,
            operation,
            call_id=call_id,
            parameters=parameters,
            error_type=error_type,
        )
        return tracked.result

    async def track_with_metadata(
        self,
        tool_name: str,
        operation: Callable[[], Awaitable[T]],
        *,
        call_id: str | None = None,
        parameters: Any = None,
        error_type: ToolErrorType | None = None,
    ) -> TrackedCallResult[T]:
        """Like track(), but also return the duration and call id.

        Example:
            tracked = await tracker.track_with_metadata("search", lambda: db.search(q))
            logger.info(f"Call {tracked.call_id} took {tracked.duration_ms}ms")
        """
        call_id = call_id or generate_id()
        parameters_json = _encode_parameters(parameters)
        start = time.perf_counter()

        try:
            result = await operation()
        except Exception as e:
            self._dispatch(
                self.analytics.track_error(
                    tool_name,
                    e,
                    call_id=call_id,
                    parameters=parameters_json,
                    error_type=error_type or infer_error_type(e),
                )
            )
            raise

        duration_ms = _elapsed_ms(start)
        self._dispatch(
            self.analytics.track_success(
                tool_name,
                duration_ms,
                call_id=call_id,
                parameters=parameters_json,
                response_size_bytes=_response_size(result),
            )
        )
        return TrackedCallResult(result=result, duration_ms=duration_ms, call_id=call_id)

    def wrap(
        self,
        tool_name: str,
        fn: Callable[P, Awaitable[T]],
        *,
        error_type: ToolErrorType | None = None,
    ) -> Callable[P, Coroutine[Any, Any, T]]:
        """Create a tracked version of an async tool function.

        A single argument is reported as the parameters on its own; any
        other number is reported as a list. Keyword arguments count as one
        trailing mapping.

        Example:
            tracked_search = tracker.wrap("search_database", search_database)
            result = await tracked_search({"query": "test"})
        """

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            captured: list[Any] = list(args)
            if kwargs:
                captured.append(dict(kwargs))
            return await self.track(
                tool_name,
                lambda: fn(*args, **kwargs),
                parameters=captured[0] if len(captured) == 1 else captured,
                error_type=error_type,
            )

        return wrapper

    async def flush(self, timeout: float | None = None) -> None:
        """Wait for in-flight reports to finish.

        Report failures are not raised. Useful before shutdown.

        Args:
            timeout: Maximum seconds to wait, None to wait indefinitely
        """
        if not self._pending:
            return
        _, still_pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if still_pending:
            logger.debug(f"{len(still_pending)} analytics report(s) still pending after flush")

    def _dispatch(self, report: Coroutine[Any, Any, None]) -> None:
        """Run a report in the background, keeping a reference until it completes."""
        task = asyncio.get_running_loop().create_task(report)
        self._pending.add(task)
        task.add_done_callback(self._on_report_done)

    def _on_report_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug(f"Analytics report failed: {error}")
