"""
Log formatters for different output formats.

Provides structured JSON formatting, key/value console formatting, and Rich
terminal output. Interceptor records carry their fields in ``extra_context``;
every formatter here renders them.
"""

import json
import logging
import traceback
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, service_name: str = "scrubwire", version: str = "unknown"):
        super().__init__()
        self.service_name = service_name
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "service": self.service_name,
            "version": self.version,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.thread,
            "thread_name": record.threadName,
        }

        if hasattr(record, "correlation_id"):
            log_entry["correlation_id"] = record.correlation_id

        if hasattr(record, "extra_context"):
            log_entry.update(record.extra_context)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class KeyValueFormatter(logging.Formatter):
    """Human-readable formatter that appends structured fields as ``k=v`` pairs."""

    def __init__(
        self,
        fmt: str = "%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
        datefmt: str = "%Y-%m-%d %H:%M:%S",
    ):
        super().__init__(fmt, datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, "extra_context", None)
        if fields:
            pairs = " ".join(f"{key}={value}" for key, value in fields.items())
            line = f"{line} | {pairs}"
        return line


def create_console_formatter() -> logging.Formatter:
    """Create a console formatter for human-readable output."""
    return KeyValueFormatter()


def create_rich_handler() -> logging.Handler:
    """Create a Rich handler for enhanced terminal output."""
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(KeyValueFormatter(fmt="%(message)s"))
    return handler


def create_structured_formatter(
    service_name: str = "scrubwire", version: str = "unknown"
) -> StructuredFormatter:
    """Create a structured JSON formatter."""
    return StructuredFormatter(service_name, version)
