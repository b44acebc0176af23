"""
Redaction of sensitive data in HTTP traffic.

- classifier: Content type and body sniffing
- fields: Sensitive field and header name matching
- detectors / scanning: Secret detection (regex and hand-written scanners)
- structural: JSON, XML, form and multipart sanitizers
- policy: Skip / truncate / summarize rules for bodies
- headers: Header, query string and URL sanitization
- sanitizer: The ``Sanitizer`` facade and its ``SanitizerConfig``
"""

from .classifier import ContentKind, classify
from .detectors import (
    BUILTIN_PATTERN_NAMES,
    DetectionStrategy,
    RegexDetector,
    SecretDetector,
    SecretPattern,
    default_patterns,
)
from .fields import FieldMatcher
from .headers import HeaderMaskMode, HeaderSanitizer
from .policy import BodyAction, BodyPolicy, BodyRule, default_body_rules, format_size
from .sanitizer import Sanitizer, SanitizerConfig, build_detector
from .scanning import ScanningDetector
from .structural import StructuralSanitizer

__all__ = [
    "ContentKind",
    "classify",
    "BUILTIN_PATTERN_NAMES",
    "DetectionStrategy",
    "RegexDetector",
    "ScanningDetector",
    "SecretDetector",
    "SecretPattern",
    "default_patterns",
    "FieldMatcher",
    "HeaderMaskMode",
    "HeaderSanitizer",
    "BodyAction",
    "BodyPolicy",
    "BodyRule",
    "default_body_rules",
    "format_size",
    "Sanitizer",
    "SanitizerConfig",
    "build_detector",
    "StructuralSanitizer",
]
