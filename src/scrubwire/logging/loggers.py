"""
Enhanced logger classes with correlation IDs and structured context.

``ScrubLogger`` is the default implementation of the interceptor's logger
capability: every keyword argument becomes a structured field, in call order.
"""

import logging
from typing import Any, Dict, Optional
from uuid import uuid4


class ScrubLogger:
    """Logger with structured fields and a correlation ID."""

    def __init__(self, name: str, correlation_id: Optional[str] = None):
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id or str(uuid4())
        self.extra_context: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.logger.name

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields):
        """Internal logging method with correlation ID and context."""
        if not self.logger.isEnabledFor(level):
            return

        extra: Dict[str, Any] = {'correlation_id': self.correlation_id}
        context = self.extra_context.copy()
        context.update(fields)
        if context:
            extra['extra_context'] = context

        self.logger.log(level, msg, extra=extra, exc_info=exc_info)

    def debug(self, msg: str, **fields):
        """Log debug message."""
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields):
        """Log info message."""
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields):
        """Log warning message."""
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields):
        """Log error message."""
        self._log(logging.ERROR, msg, **fields)

    def exception(self, msg: str, **fields):
        """Log error message with the active traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **fields)

    def add_context(self, **kwargs):
        """Add persistent context to this logger."""
        self.extra_context.update(kwargs)

    def clear_context(self):
        """Clear persistent context."""
        self.extra_context.clear()


def get_logger(name: str, correlation_id: Optional[str] = None) -> ScrubLogger:
    """Get a ScrubLogger instance."""
    return ScrubLogger(name, correlation_id)
