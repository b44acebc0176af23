"""
Tests for configuration models.
"""

import logging

import pytest
from pydantic import ValidationError

from scrubwire.constants import DEFAULT_MASK, DEFAULT_SENSITIVE_FIELDS
from scrubwire.core.config import (
    InterceptorSection,
    LoggingSection,
    LogLevel,
    SanitizerSection,
    ScrubwireConfig,
)
from scrubwire.core.security import BUILTIN_PATTERN_NAMES, DetectionStrategy, HeaderMaskMode
from scrubwire.infrastructure.http import InterceptorConfig
from scrubwire.logging import ScrubLogger


@pytest.mark.unit
class TestSanitizerSection:
    """Test the [sanitizer] section."""

    def test_defaults(self):
        section = SanitizerSection()

        assert section.mask == DEFAULT_MASK
        assert section.detection is DetectionStrategy.PATTERN
        assert section.header_mask_mode is HeaderMaskMode.PARTIAL
        assert section.resolved_fields() == list(DEFAULT_SENSITIVE_FIELDS)
        assert {p.name for p in section.resolved_patterns()} == BUILTIN_PATTERN_NAMES

    def test_enum_values_from_strings(self):
        section = SanitizerSection(detection="scan", header_mask_mode="full")

        assert section.detection is DetectionStrategy.SCAN
        assert section.header_mask_mode is HeaderMaskMode.FULL

    @pytest.mark.parametrize("overrides", [
        {"mask": ""},
        {"max_body_size": 0},
        {"detection": "fuzzy"},
        {"max_nesting_depth": -1},
        {"patterns": ["bearer_token", "nope"]},
        {"custom_patterns": {"broken": "("}},
    ])
    def test_invalid_values_rejected(self, overrides):
        """Test that invalid settings fail validation."""
        with pytest.raises(ValidationError):
            SanitizerSection(**overrides)

    def test_replacing_and_extending_fields(self):
        """Test that sensitive_fields replaces and extra_sensitive_fields extends."""
        section = SanitizerSection(sensitive_fields=["only"], extra_sensitive_fields=["more"])

        assert section.resolved_fields() == ["only", "more"]

    def test_extra_headers_extend_defaults(self):
        section = SanitizerSection(extra_sensitive_headers=["X-Tenant"])

        assert "authorization" in section.resolved_headers()
        assert "X-Tenant" in section.resolved_headers()

    def test_selected_and_custom_patterns(self):
        """Test enabling a subset of detectors plus a custom one."""
        section = SanitizerSection(patterns=["jwt"], custom_patterns={"employee": r"EMP-\d{6}"})

        assert [p.name for p in section.resolved_patterns()] == ["jwt", "employee"]


@pytest.mark.unit
class TestInterceptorAndLoggingSections:
    """Test the [interceptor] and [logging] sections."""

    def test_interceptor_defaults(self):
        section = InterceptorSection()

        assert section.log_request_body is True
        assert section.log_headers is True
        assert section.verbose is False
        assert section.logger_name == "scrubwire.http"

    def test_exclude_hosts_normalized(self):
        section = InterceptorSection(exclude_hosts=[" Health.Internal ", ""])

        assert section.exclude_hosts == ["health.internal"]

    @pytest.mark.parametrize("overrides", [
        {"format": "xml"},
        {"output": ["syslog"]},
        {"level": "TRACE"},
        {"backup_count": 0},
    ])
    def test_invalid_logging_values(self, overrides):
        with pytest.raises(ValidationError):
            LoggingSection(**overrides)

    def test_to_logging_config(self, temp_dir):
        """Test conversion into the runtime logging configuration."""
        section = LoggingSection(level=LogLevel.DEBUG, format="json", output=["console", "file"],
                                 file_path=temp_dir / "scrubwire.log")

        config = section.to_logging_config(version="1.2.3")

        assert config.level == logging.DEBUG
        assert config.format_type == "json"
        assert config.output == ["console", "file"]
        assert config.file_path == temp_dir / "scrubwire.log"
        assert config.version == "1.2.3"


@pytest.mark.unit
class TestScrubwireConfig:
    """Test the top-level model and its runtime builders."""

    def test_unknown_sections_rejected(self):
        with pytest.raises(ValidationError):
            ScrubwireConfig(unknown={})

    def test_build_sanitizer_config(self):
        config = ScrubwireConfig(sanitizer={
            "mask": "[x]",
            "detection": "scan",
            "sensitive_fields": ["Badge"],
            "max_body_size": 10,
            "scan_header_values": True,
        })

        sanitizer_config = config.build_sanitizer_config()

        assert sanitizer_config.mask == "[x]"
        assert sanitizer_config.detection is DetectionStrategy.SCAN
        assert sanitizer_config.sensitive_fields == frozenset({"badge"})
        assert sanitizer_config.max_body_size == 10
        assert sanitizer_config.scan_header_values is True

    def test_build_interceptor_config(self, mock_logger, prepare_request):
        """Test host exclusion and body size limits."""
        config = ScrubwireConfig(interceptor={
            "verbose": True,
            "log_response_body": False,
            "exclude_hosts": ["health.internal"],
            "max_logged_body_size": 10,
        })

        interceptor_config = config.build_interceptor_config(mock_logger)

        assert isinstance(interceptor_config, InterceptorConfig)
        assert interceptor_config.logger is mock_logger
        assert interceptor_config.verbose is True
        assert interceptor_config.log_response_body is False

        request = prepare_request("GET", "https://api.example.com/v1")
        assert interceptor_config.should_log(prepare_request("GET", "https://HEALTH.internal/ping")) is False
        assert interceptor_config.should_log(request) is True
        assert interceptor_config.should_log_body(request, "text/plain", 10) is True
        assert interceptor_config.should_log_body(request, "text/plain", 11) is False
        assert interceptor_config.should_log_body(request, "image/png", 1) is False

    def test_build_interceptor_config_default_logger(self):
        """Test that a ScrubLogger named after logger_name is created."""
        config = ScrubwireConfig(interceptor={"logger_name": "myapp.outbound"})

        interceptor_config = config.build_interceptor_config()

        assert isinstance(interceptor_config.logger, ScrubLogger)
        assert interceptor_config.logger.name == "myapp.outbound"
