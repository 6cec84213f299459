"""Structured logging for mimos-analytics.

All diagnostics go through loguru. Sends are wrapped in a LogSpan so each
delivery attempt produces one DEBUG record with timing and outcome.

Usage:
    from mimos_analytics.logging import LogSpan

    with LogSpan(span="backend.send", event_type="tool_call") as s:
        response = await client.post(url, content=body)
        s.add("status", response.status_code)
"""

from __future__ import annotations

import sys
import time
from typing import IO, Any

from loguru import logger

__all__ = ["LogSpan", "configure_logging"]


class LogSpan:
    """A structured logging span with timing and attributes."""

    def __init__(self, span: str, **attrs: Any) -> None:
        """Initialize a log span.

        Args:
            span: Span name (e.g., "frontend.send")
            **attrs: Initial attributes to log
        """
        self.span = span
        self.attrs: dict[str, Any] = dict(attrs)
        self.start_time = time.perf_counter()
        self.error: str | None = None

    def add(self, key: str | None = None, value: Any = None, **attrs: Any) -> LogSpan:
        """Add attributes to the span.

        Supports both positional and keyword argument styles.

        Args:
            key: Attribute name (optional if using kwargs)
            value: Attribute value (required if key is provided)
            **attrs: Bulk attribute additions (e.g., status=202, ok=True)

        Returns:
            Self for method chaining
        """
        if key is not None:
            self.attrs[key] = value
        self.attrs.update(attrs)
        return self

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.start_time) * 1000, 2)

    def __enter__(self) -> LogSpan:
        return self

    def __exit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        if exc is not None:
            self.error = f"{type(exc).__name__}: {exc}"
        self._emit()

    def _emit(self) -> None:
        entry = {"span": self.span, "elapsed_ms": self.elapsed_ms, **self.attrs}
        if self.error:
            entry["error"] = self.error
        logger.bind(**entry).debug(
            " ".join(f"{k}={v}" for k, v in entry.items())
        )


def configure_logging(level: str = "INFO", sink: IO[str] | None = None) -> None:
    """Replace loguru's default handler with one at the given level.

    Args:
        level: Minimum level name (e.g., "DEBUG", "WARNING")
        sink: Output stream, defaults to stderr
    """
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | {message}",
    )
