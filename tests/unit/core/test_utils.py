"""Unit tests for id generation and logging helpers."""

from __future__ import annotations

import io
import re
import sys
import time

import pytest
from loguru import logger

from mimos_analytics.logging import LogSpan, configure_logging
from mimos_analytics.utils import generate_id, now_ms


@pytest.mark.unit
@pytest.mark.core
class TestGenerateId:
    """Tests for call and session id generation."""

    def test_format(self) -> None:
        assert re.fullmatch(r"\d{13}-[0-9a-z]{9}", generate_id())

    def test_timestamp_prefix_is_current(self) -> None:
        before = now_ms()
        prefix = int(generate_id().split("-")[0])
        after = now_ms()
        assert before <= prefix <= after

    def test_low_collision(self) -> None:
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_now_ms(self) -> None:
        assert abs(now_ms() - int(time.time() * 1000)) < 1000


@pytest.mark.unit
@pytest.mark.core
class TestLogSpan:
    """Tests for LogSpan structured logging."""

    def test_emits_attributes(self, log_messages: list[str]) -> None:
        with LogSpan(span="backend.send", event_type="tool_call") as s:
            s.add("status", 202)

        assert len(log_messages) == 1
        assert "span=backend.send" in log_messages[0]
        assert "event_type=tool_call" in log_messages[0]
        assert "status=202" in log_messages[0]
        assert "elapsed_ms=" in log_messages[0]

    def test_add_kwargs_chain(self) -> None:
        span = LogSpan(span="x").add(a=1).add("b", 2)
        assert span.attrs == {"a": 1, "b": 2}

    def test_records_error_and_reraises(self, log_messages: list[str]) -> None:
        with pytest.raises(RuntimeError):
            with LogSpan(span="frontend.send"):
                raise RuntimeError("nope")

        assert "error=RuntimeError: nope" in log_messages[0]


@pytest.mark.unit
@pytest.mark.core
def test_configure_logging_level() -> None:
    """configure_logging filters below the requested level."""
    stream = io.StringIO()
    try:
        configure_logging("warning", sink=stream)
        logger.info("hidden")
        logger.warning("shown")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    output = stream.getvalue()
    assert "shown" in output
    assert "hidden" not in output
