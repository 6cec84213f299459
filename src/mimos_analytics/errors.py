"""Error description and classification for error events.

Tracking methods accept either an exception or a plain message string.
ErrorInfo normalises both into the message, code and stack trace fields
that tool_error and app_load_error payloads carry.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Literal

from mimos_analytics.models import ToolErrorType

__all__ = ["ErrorInfo", "infer_error_type"]

# Fallback error code for plain string errors
DEFAULT_ERROR_CODE = "Error"


@dataclass(frozen=True)
class ErrorInfo:
    """Human message, type tag and optional stack trace of a failure."""

    message: str
    code: str
    stack_trace: str | None = None

    @classmethod
    def from_error(
        cls,
        error: BaseException | str,
        *,
        code: str | None = None,
        code_source: Literal["class", "name"] = "class",
    ) -> ErrorInfo:
        """Describe an exception or plain message.

        Args:
            error: Exception instance or plain message string
            code: Explicit error code, overrides the derived one
            code_source: "class" uses the exception class name; "name" prefers
                a ``name`` attribute on the exception, falling back to the class

        Returns:
            ErrorInfo for the error
        """
        if isinstance(error, str):
            return cls(message=error, code=code or DEFAULT_ERROR_CODE)

        derived = type(error).__name__
        if code_source == "name":
            name = getattr(error, "name", None)
            if isinstance(name, str) and name:
                derived = name

        return cls(
            message=str(error),
            code=code or derived,
            stack_trace="".join(traceback.format_exception(error)),
        )


_TIMEOUT_TERMS = ("timeout", "timed out")
_VALIDATION_TERMS = ("invalid", "required")
_RATE_LIMIT_TERMS = ("rate limit", "too many requests", "429")
_NETWORK_TERMS = ("network", "fetch", "econnrefused")


def infer_error_type(error: object) -> ToolErrorType:
    """Classify a failure from its class name and message.

    Checks run in order and the first match wins: timeout, validation,
    rate limit, network (external), otherwise internal. Anything that is
    not an exception is "unknown".

    Args:
        error: The raised value

    Returns:
        Error category
    """
    if not isinstance(error, BaseException):
        return "unknown"

    name = type(error).__name__.lower()
    message = str(error).lower()

    if "timeout" in name or any(term in message for term in _TIMEOUT_TERMS):
        return "timeout"
    if "validation" in name or any(term in message for term in _VALIDATION_TERMS):
        return "validation"
    if any(term in message for term in _RATE_LIMIT_TERMS):
        return "rate_limit"
    if "connect" in name or any(term in message for term in _NETWORK_TERMS):
        return "external"

    return "internal"
