"""
Sanitization exceptions.

These never reach library callers: the sanitizer and the interceptor catch
them and fall back to a more conservative rendering of the body.
"""

from typing import Optional

from .base import ExceptionContext, ScrubwireError


class SanitizationError(ScrubwireError):
    """Base class for failures while preparing a body for the log."""
    pass


class BodyParseError(SanitizationError):
    """Raised when a structural sanitizer cannot parse its input."""

    def __init__(self, body_format: str, reason: Optional[str] = None):
        self.body_format = body_format
        self.reason = reason
        message = f"Could not parse body as {body_format}"
        if reason:
            message += f": {reason}"
        context = ExceptionContext(
            error_code="BODY_PARSE",
            context={"format": body_format},
        )
        super().__init__(message, context)


class BodyReadError(SanitizationError):
    """Raised when a request or response body stream cannot be buffered."""

    def __init__(self, source: str, reason: Optional[str] = None):
        self.source = source
        self.reason = reason
        message = f"Could not read {source} body"
        if reason:
            message += f": {reason}"
        context = ExceptionContext(
            error_code="BODY_READ",
            context={"source": source},
        )
        super().__init__(message, context)
