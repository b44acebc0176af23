"""
scrubwire: sanitized logging of outgoing HTTP traffic

A Python library that logs requests made through ``requests`` while
redacting secrets in JSON, XML, form and multipart bodies, plain text,
headers, query strings and URLs.

Architecture Overview:
- core.security: Classification, secret detection, structural sanitizers,
  body policy and the Sanitizer facade
- core.config: TOML/environment configuration
- infrastructure.http: LoggingAdapter transport interceptor and HttpClient
- logging / exceptions: Cross-cutting concerns
- cli: Command-line interface
"""

__version__ = "0.1.0"

# Public API exports
from .core.security import (
    DetectionStrategy,
    HeaderMaskMode,
    Sanitizer,
    SanitizerConfig,
    SecretPattern,
)
from .exceptions import ScrubwireError
from .infrastructure.http import (
    HttpClient,
    InterceptorConfig,
    LoggingAdapter,
    install_logging,
)

__all__ = [
    "DetectionStrategy",
    "HeaderMaskMode",
    "Sanitizer",
    "SanitizerConfig",
    "SecretPattern",
    "ScrubwireError",
    "HttpClient",
    "InterceptorConfig",
    "LoggingAdapter",
    "install_logging",
]
