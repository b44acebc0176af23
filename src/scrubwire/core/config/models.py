"""
Configuration models for scrubwire.

This module defines Pydantic-based configuration models for the TOML file
and the ``SCRUBWIRE_*`` environment variables. They are turned into the
runtime ``SanitizerConfig`` and ``InterceptorConfig`` objects by
``ScrubwireConfig``.
"""

import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrubwire.constants import (
    DEFAULT_MASK,
    DEFAULT_MAX_BODY_SIZE,
    DEFAULT_MAX_NESTING_DEPTH,
    DEFAULT_SENSITIVE_FIELDS,
    DEFAULT_SENSITIVE_HEADERS,
    MAX_LOGGED_BODY_SIZE,
)
from scrubwire.core.security import (
    BUILTIN_PATTERN_NAMES,
    DetectionStrategy,
    HeaderMaskMode,
    SanitizerConfig,
    SecretPattern,
    default_patterns,
)
from scrubwire.logging import LoggingConfig as RuntimeLoggingConfig
from scrubwire.logging.config import LOG_FORMATS, LOG_OUTPUTS

DEFAULT_LOG_FILE_SIZE_BYTES = 10 * 1024 * 1024
MIN_LOG_FILE_SIZE_BYTES = 1024
DEFAULT_LOG_BACKUP_COUNT = 5


class LogLevel(str, Enum):
    """Valid logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class SanitizerSection(BaseModel):
    """``[sanitizer]`` section: what gets redacted and how."""

    mask: str = Field(DEFAULT_MASK, min_length=1, description="Replacement text")
    max_body_size: int = Field(
        DEFAULT_MAX_BODY_SIZE, ge=1, description="Truncate bodies above this many bytes"
    )
    detection: DetectionStrategy = Field(
        DetectionStrategy.PATTERN, description="Secret detection: pattern or scan"
    )
    header_mask_mode: HeaderMaskMode = Field(
        HeaderMaskMode.PARTIAL, description="Header masking: full or partial"
    )
    scan_header_values: bool = Field(
        False, description="Also scan non-sensitive header values for secrets"
    )
    max_nesting_depth: int = Field(
        DEFAULT_MAX_NESTING_DEPTH, ge=0, le=100, description="JSON-in-string unpacking depth"
    )
    sensitive_fields: Optional[List[str]] = Field(
        None, description="Replaces the built-in sensitive field list"
    )
    extra_sensitive_fields: List[str] = Field(
        default_factory=list, description="Added to the sensitive field list"
    )
    sensitive_headers: Optional[List[str]] = Field(
        None, description="Replaces the built-in sensitive header list"
    )
    extra_sensitive_headers: List[str] = Field(
        default_factory=list, description="Added to the sensitive header list"
    )
    patterns: Optional[List[str]] = Field(
        None, description="Built-in detectors to enable (all when unset)"
    )
    custom_patterns: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra regex detectors; a 'prefix' group is kept unmasked",
    )

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        unknown = [name for name in v if name not in BUILTIN_PATTERN_NAMES]
        if unknown:
            raise ValueError(
                f"unknown detectors: {', '.join(unknown)}; "
                f"valid: {', '.join(sorted(BUILTIN_PATTERN_NAMES))}"
            )
        return v

    @field_validator("custom_patterns")
    @classmethod
    def validate_custom_patterns(cls, v: Dict[str, str]) -> Dict[str, str]:
        for name, pattern in v.items():
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"custom pattern '{name}' is not a valid regex: {e}")
        return v

    def resolved_fields(self) -> List[str]:
        base = DEFAULT_SENSITIVE_FIELDS if self.sensitive_fields is None else self.sensitive_fields
        return list(base) + self.extra_sensitive_fields

    def resolved_headers(self) -> List[str]:
        base = DEFAULT_SENSITIVE_HEADERS if self.sensitive_headers is None else self.sensitive_headers
        return list(base) + self.extra_sensitive_headers

    def resolved_patterns(self) -> List[SecretPattern]:
        builtin = default_patterns()
        if self.patterns is not None:
            enabled = set(self.patterns)
            builtin = tuple(p for p in builtin if p.name in enabled)
        custom = [SecretPattern.compile(name, regex) for name, regex in self.custom_patterns.items()]
        return list(builtin) + custom


class InterceptorSection(BaseModel):
    """``[interceptor]`` section: what the logging adapter records."""

    log_request_body: bool = Field(True, description="Log request bodies")
    log_response_body: bool = Field(True, description="Log response bodies")
    log_headers: bool = Field(True, description="Log request and response headers")
    verbose: bool = Field(False, description="Add path, query and content length fields")
    logger_name: str = Field("scrubwire.http", min_length=1, description="Logger name")
    max_logged_body_size: int = Field(
        MAX_LOGGED_BODY_SIZE, ge=1, description="Bodies above this size are not logged"
    )
    exclude_hosts: List[str] = Field(
        default_factory=list, description="Hosts whose traffic is never logged"
    )

    @field_validator("exclude_hosts")
    @classmethod
    def normalize_hosts(cls, v: List[str]) -> List[str]:
        return [host.strip().lower() for host in v if host.strip()]


class LoggingSection(BaseModel):
    """``[logging]`` section."""

    level: LogLevel = Field(LogLevel.INFO, description="Logging level")
    format: str = Field("console", description="Log format: console, json, rich")
    output: List[str] = Field(["console"], description="Log outputs: console, file")
    file_path: Optional[Path] = Field(None, description="Log file path")
    max_file_size: int = Field(
        DEFAULT_LOG_FILE_SIZE_BYTES,
        ge=MIN_LOG_FILE_SIZE_BYTES,
        description="Maximum log file size in bytes",
    )
    backup_count: int = Field(
        DEFAULT_LOG_BACKUP_COUNT,
        ge=1,
        le=20,
        description="Number of backup log files to keep",
    )

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in LOG_FORMATS:
            raise ValueError(f"format must be one of: {', '.join(LOG_FORMATS)}")
        return v

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: List[str]) -> List[str]:
        for output in v:
            if output not in LOG_OUTPUTS:
                raise ValueError(f"output must contain only: {', '.join(LOG_OUTPUTS)}")
        return v

    def to_logging_config(self, version: str = "unknown") -> RuntimeLoggingConfig:
        return RuntimeLoggingConfig(
            level=self.level.value,
            format_type=self.format,
            output=list(self.output),
            file_path=self.file_path,
            max_file_size=self.max_file_size,
            backup_count=self.backup_count,
            version=version,
        )


class ScrubwireConfig(BaseModel):
    """Main scrubwire configuration model."""

    sanitizer: SanitizerSection = Field(default_factory=SanitizerSection)
    interceptor: InterceptorSection = Field(default_factory=InterceptorSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)

    model_config = {
        "extra": "forbid",  # Don't allow extra fields
        "validate_assignment": True,  # Validate on assignment
        "str_strip_whitespace": True,  # Strip whitespace from strings
    }

    def build_sanitizer_config(self) -> SanitizerConfig:
        """Create the immutable runtime sanitizer configuration."""
        section = self.sanitizer
        return SanitizerConfig(
            sensitive_fields=section.resolved_fields(),
            sensitive_patterns=tuple(section.resolved_patterns()),
            detection=section.detection,
            mask=section.mask,
            max_body_size=section.max_body_size,
            header_mask_mode=section.header_mask_mode,
            sensitive_headers=section.resolved_headers(),
            scan_header_values=section.scan_header_values,
            max_nesting_depth=section.max_nesting_depth,
        )

    def build_interceptor_config(self, logger=None):
        """Create the runtime ``InterceptorConfig`` for the logging adapter.

        Args:
            logger: Logger to use; a ``ScrubLogger`` named after
                ``interceptor.logger_name`` when omitted
        """
        from scrubwire.infrastructure.http.interceptor import InterceptorConfig
        from scrubwire.logging import ScrubLogger

        section = self.interceptor
        config = InterceptorConfig.default(logger or ScrubLogger(section.logger_name))
        return config.model_copy(
            update={
                "log_request_body": section.log_request_body,
                "log_response_body": section.log_response_body,
                "log_headers": section.log_headers,
                "verbose": section.verbose,
                "sanitizer_config": self.build_sanitizer_config(),
                "should_log": config.host_filter(section.exclude_hosts),
                "should_log_body": config.body_size_filter(section.max_logged_body_size),
            }
        )


class ScrubwireSettings(BaseSettings):
    """Settings that can be overridden by environment variables."""

    # Sanitizer settings
    scrubwire_mask: Optional[str] = Field(None, alias="SCRUBWIRE_MASK")
    scrubwire_max_body_size: Optional[int] = Field(None, alias="SCRUBWIRE_MAX_BODY_SIZE")
    scrubwire_header_mask_mode: Optional[str] = Field(
        None, alias="SCRUBWIRE_HEADER_MASK_MODE"
    )
    scrubwire_detection: Optional[str] = Field(None, alias="SCRUBWIRE_DETECTION")
    scrubwire_extra_sensitive_fields: Optional[str] = Field(
        None, alias="SCRUBWIRE_EXTRA_SENSITIVE_FIELDS"
    )

    # Interceptor settings
    scrubwire_verbose: Optional[bool] = Field(None, alias="SCRUBWIRE_VERBOSE")

    # Logging settings
    scrubwire_logging_level: Optional[str] = Field(None, alias="SCRUBWIRE_LOGGING_LEVEL")
    scrubwire_logging_format: Optional[str] = Field(None, alias="SCRUBWIRE_LOGGING_FORMAT")
    scrubwire_logging_output: Optional[str] = Field(None, alias="SCRUBWIRE_LOGGING_OUTPUT")
    scrubwire_logging_file_path: Optional[str] = Field(
        None, alias="SCRUBWIRE_LOGGING_FILE_PATH"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )
