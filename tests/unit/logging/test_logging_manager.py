"""
Tests for LoggingManager.
"""

import json
import logging
import logging.handlers

import pytest

from scrubwire.logging import (
    LoggingConfig,
    LoggingManager,
    ScrubLogger,
    StructuredFormatter,
    configure_logging,
    logging_manager,
)


@pytest.mark.unit
class TestLoggingManager:
    """Test centralized logging setup."""

    def test_singleton(self):
        assert LoggingManager() is logging_manager

    def test_console_json_handler(self):
        configure_logging(LoggingConfig(level="DEBUG", format_type="json"))

        assert len(logging_manager.handlers) == 1
        handler = logging_manager.handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)
        assert handler in logging.getLogger().handlers
        assert logging.getLogger().level == logging.DEBUG

    def test_reconfigure_replaces_handlers(self):
        """Test that configuring twice does not stack handlers."""
        configure_logging(LoggingConfig(format_type="console"))
        first = list(logging_manager.handlers)

        configure_logging(LoggingConfig(format_type="rich"))

        assert len(logging_manager.handlers) == 1
        assert first[0] not in logging.getLogger().handlers

    def test_file_output(self, temp_dir):
        """Test rotating file output with structured records."""
        log_file = temp_dir / "logs" / "scrubwire.log"
        configure_logging(LoggingConfig(level="INFO", format_type="json", output="file", file_path=log_file))

        ScrubLogger("scrubwire.filetest").info("← HTTP Response", status=200)
        for handler in logging_manager.handlers:
            handler.flush()

        assert isinstance(logging_manager.handlers[0], logging.handlers.RotatingFileHandler)
        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["message"] == "← HTTP Response"
        assert entry["status"] == 200

    def test_scrubwire_logger_levels_follow_config(self):
        existing = logging.getLogger("scrubwire.leveltest")

        configure_logging(LoggingConfig(level="ERROR"))

        assert existing.level == logging.ERROR

    def test_get_logger(self):
        logger = logging_manager.get_logger("scrubwire.x", correlation_id="c1")

        assert isinstance(logger, ScrubLogger)
        assert logger.correlation_id == "c1"
