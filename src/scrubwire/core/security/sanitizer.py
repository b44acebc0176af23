"""
Sanitizer facade.

``Sanitizer`` is the single entry point used by the interceptor and the
command line: it applies the body policy, classifies the body, runs the
matching structural sanitizer and guarantees that nothing is raised to the
caller. ``SanitizerConfig`` is built once and never mutated.
"""

import logging
from typing import Dict, FrozenSet, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scrubwire.constants import (
    BINARY_BODY_MESSAGE,
    DEFAULT_MASK,
    DEFAULT_MAX_BODY_SIZE,
    DEFAULT_MAX_NESTING_DEPTH,
    DEFAULT_SENSITIVE_FIELDS,
    DEFAULT_SENSITIVE_HEADERS,
    FAILED_BODY_MESSAGE,
    SKIPPED_BODY_MESSAGE,
)
from scrubwire.exceptions import BodyParseError

from .classifier import ContentKind, classify
from .detectors import (
    DetectionStrategy,
    RegexDetector,
    SecretDetector,
    SecretPattern,
    default_patterns,
)
from .fields import FieldMatcher
from .headers import HeaderMaskMode, HeaderSanitizer, HeaderValue
from .policy import (
    BodyAction,
    BodyPolicy,
    BodyRule,
    default_body_rules,
    summarize_body,
    truncation_notice,
)
from .scanning import ScanningDetector
from .structural import StructuralSanitizer

logger = logging.getLogger(__name__)


class SanitizerConfig(BaseModel):
    """Immutable sanitizer settings.

    Empty or non-positive values for ``mask``, ``sensitive_headers`` and
    ``max_body_size`` fall back to the built-in defaults.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    sensitive_fields: FrozenSet[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_SENSITIVE_FIELDS),
        description="Case-insensitive substrings of sensitive field names",
    )
    sensitive_patterns: Tuple[SecretPattern, ...] = Field(
        default_factory=default_patterns,
        description="Secret detectors, in application order",
    )
    detection: DetectionStrategy = Field(
        DetectionStrategy.PATTERN, description="Secret detection strategy"
    )
    mask: str = Field(DEFAULT_MASK, description="Replacement for sensitive values")
    max_body_size: int = Field(
        DEFAULT_MAX_BODY_SIZE, description="Bodies above this size are truncated"
    )
    body_rules: Tuple[BodyRule, ...] = Field(
        default_factory=default_body_rules,
        description="Body rules, first match wins",
    )
    header_mask_mode: HeaderMaskMode = Field(
        HeaderMaskMode.PARTIAL, description="How sensitive header values are masked"
    )
    sensitive_headers: FrozenSet[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_SENSITIVE_HEADERS),
        description="Exact, case-insensitive sensitive header names",
    )
    scan_header_values: bool = Field(
        False, description="Run the secret detector over non-sensitive header values"
    )
    max_nesting_depth: int = Field(
        DEFAULT_MAX_NESTING_DEPTH,
        ge=0,
        description="Levels of JSON-in-string that are unpacked",
    )

    @field_validator("sensitive_fields", mode="before")
    @classmethod
    def normalize_fields(cls, v):
        if isinstance(v, str):
            v = [v]
        return frozenset(str(field).lower() for field in v if field)

    @field_validator("sensitive_headers", mode="before")
    @classmethod
    def normalize_headers(cls, v):
        if isinstance(v, str):
            v = [v]
        headers = frozenset(str(header).lower() for header in (v or ()) if header)
        return headers or frozenset(DEFAULT_SENSITIVE_HEADERS)

    @field_validator("mask", mode="before")
    @classmethod
    def default_mask_when_empty(cls, v):
        return v or DEFAULT_MASK

    @field_validator("max_body_size", mode="before")
    @classmethod
    def default_size_when_not_positive(cls, v):
        if v is None or int(v) <= 0:
            return DEFAULT_MAX_BODY_SIZE
        return v


def build_detector(
    strategy: DetectionStrategy, patterns: Sequence[SecretPattern], mask: str
) -> SecretDetector:
    """Create the secret detector for ``strategy``."""
    if DetectionStrategy(strategy) is DetectionStrategy.SCAN:
        return ScanningDetector([pattern.name for pattern in patterns], mask)
    return RegexDetector(patterns, mask)


class Sanitizer:
    """Redacts sensitive data from bodies, headers, query strings and URLs.

    Every public method returns a log-ready string and never raises.
    """

    def __init__(self, config: Optional[SanitizerConfig] = None):
        self.config = config or SanitizerConfig()
        cfg = self.config

        self.matcher = FieldMatcher(cfg.sensitive_fields, cfg.sensitive_headers)
        self.detector = build_detector(cfg.detection, cfg.sensitive_patterns, cfg.mask)
        self.policy = BodyPolicy(cfg.body_rules, cfg.max_body_size)
        self.structural = StructuralSanitizer(
            self.matcher, self.detector, cfg.mask, cfg.max_nesting_depth
        )
        self.header_sanitizer = HeaderSanitizer(
            self.matcher,
            cfg.mask,
            mode=cfg.header_mask_mode,
            detector=self.detector,
            scan_values=cfg.scan_header_values,
        )

    def sanitize_body(self, body: Union[bytes, str, None], content_type: str = "") -> str:
        """Sanitize a request or response body for logging.

        Args:
            body: Raw body; empty or None yields ``""``
            content_type: Declared ``Content-Type``, may be empty

        Returns:
            The sanitized body or a placeholder describing why it was not logged
        """
        if not body:
            return ""
        if isinstance(body, str):
            body = body.encode("utf-8")
        content_type = content_type or ""
        size = len(body)

        try:
            rule = self.policy.decide(content_type, body, size)
            if rule is None or rule.action is BodyAction.SANITIZE:
                return self._sanitize_structured(body, content_type)
            if rule.action is BodyAction.SKIP:
                return rule.message or SKIPPED_BODY_MESSAGE
            if rule.action is BodyAction.SUMMARIZE:
                return summarize_body(body, content_type, size)
            return self._truncate(body, content_type, size)
        except Exception:
            logger.debug("Body sanitization failed", exc_info=True)
            return FAILED_BODY_MESSAGE

    def _sanitize_structured(self, body: bytes, content_type: str) -> str:
        text = body.decode("utf-8", errors="replace")
        kind = classify(content_type, text)

        if kind is ContentKind.BINARY:
            return BINARY_BODY_MESSAGE

        handlers = {
            ContentKind.JSON: self.structural.sanitize_json,
            ContentKind.XML: self.structural.sanitize_xml,
            ContentKind.FORM_URLENCODED: self.structural.sanitize_form,
            ContentKind.MULTIPART: self.structural.sanitize_multipart,
        }
        handler = handlers.get(kind, self.structural.sanitize_text)
        try:
            return handler(text)
        except BodyParseError as e:
            logger.debug("Falling back to plain text: %s", e.message)
            return self.structural.sanitize_text(text)

    def _truncate(self, body: bytes, content_type: str, size: int) -> str:
        limit = self.config.max_body_size
        if size <= limit:
            return self._sanitize_structured(body, content_type)

        head = body[:limit].decode("utf-8", errors="ignore").encode("utf-8")
        return self._sanitize_structured(head, content_type) + truncation_notice(size)

    def sanitize_headers(self, headers: Optional[Mapping[str, HeaderValue]]) -> Dict[str, str]:
        return self.header_sanitizer.sanitize_headers(headers)

    def sanitize_query(self, raw_query: str) -> str:
        return self.header_sanitizer.sanitize_query(raw_query)

    def sanitize_url(self, url: str) -> str:
        return self.header_sanitizer.sanitize_url(url)

    def mask_secrets(self, text: str) -> str:
        """Run only the secret detector over free text."""
        return self.detector.mask_secrets(text)
