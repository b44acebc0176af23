"""
scrubwire Exception Hierarchy

Exception Hierarchy:
    ScrubwireError (base)
    ├── ConfigurationError
    │   ├── InvalidConfigurationError
    │   ├── MissingConfigurationError
    │   └── ConfigurationValidationError
    └── SanitizationError
        ├── BodyParseError
        └── BodyReadError

This package provides focused exception components:
- base: Core ScrubwireError base class
- config: Configuration-related exceptions
- sanitization: Internal body parse/read failures (always recovered)
"""

from .base import ExceptionContext, ScrubwireError

# Configuration exceptions
from .config import (
    ConfigurationError,
    ConfigurationValidationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)

# Sanitization exceptions
from .sanitization import BodyParseError, BodyReadError, SanitizationError

__all__ = [
    # Base
    "ScrubwireError",
    "ExceptionContext",
    # Configuration
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "ConfigurationValidationError",
    # Sanitization
    "SanitizationError",
    "BodyParseError",
    "BodyReadError",
]
