"""
Process-wide logging setup.

``LoggingManager`` owns the root handlers scrubwire installs, so the command
line and embedding applications can reconfigure logging without stacking
handlers or touching handlers someone else added.
"""

import logging
import logging.handlers
import sys
from typing import List, Optional

from .config import LoggingConfig
from .formatters import (
    StructuredFormatter,
    create_console_formatter,
    create_rich_handler,
)
from .loggers import ScrubLogger

PACKAGE_LOGGER_PREFIX = "scrubwire"


class LoggingManager:
    """Singleton that installs and replaces scrubwire's root handlers."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self.config: Optional[LoggingConfig] = None
            self.handlers: List[logging.Handler] = []
            self._initialized = True

    def configure(self, config: LoggingConfig) -> None:
        """Replace previously installed handlers with ones built from ``config``."""
        root_logger = logging.getLogger()
        for handler in self.handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self.handlers = [self._build_handler(output, config) for output in config.output]

        root_logger.setLevel(config.level)
        for handler in self.handlers:
            handler.setLevel(config.level)
            root_logger.addHandler(handler)

        # Loggers created before configuration keep their own level otherwise
        for name in list(logging.Logger.manager.loggerDict):
            if name.split(".", 1)[0] == PACKAGE_LOGGER_PREFIX:
                logging.getLogger(name).setLevel(config.level)

        self.config = config

    def _build_handler(self, output: str, config: LoggingConfig) -> logging.Handler:
        if output == "file":
            log_file = config.log_file
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        elif config.format_type == "rich":
            return create_rich_handler()
        else:
            handler = logging.StreamHandler(sys.stderr)

        if config.format_type == "json":
            handler.setFormatter(StructuredFormatter(config.service_name, config.version))
        else:
            handler.setFormatter(create_console_formatter())
        return handler

    def get_logger(self, name: str, correlation_id: Optional[str] = None) -> ScrubLogger:
        return ScrubLogger(name, correlation_id)


logging_manager = LoggingManager()


def configure_logging(config: LoggingConfig) -> None:
    """Configure the global logging system."""
    logging_manager.configure(config)
