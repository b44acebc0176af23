"""
scrubwire Logging Package

Structured logging for the HTTP interceptor and the command line:
- formatters: Log formatting (JSON, key/value console, rich)
- loggers: ScrubLogger with correlation IDs and structured fields
- config: Logging configuration
- manager: Centralized logging setup and management
"""

from .config import LoggingConfig
from .formatters import KeyValueFormatter, StructuredFormatter
from .loggers import ScrubLogger
from .manager import LoggingManager, configure_logging, logging_manager

get_logger = logging_manager.get_logger

__all__ = [
    "LoggingConfig",
    "LoggingManager",
    "configure_logging",
    "logging_manager",
    "ScrubLogger",
    "get_logger",
    "StructuredFormatter",
    "KeyValueFormatter",
]
