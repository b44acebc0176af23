"""
Configuration-related exceptions.

All exceptions related to configuration parsing, validation, and management.
"""

from typing import Any, List, Optional

from .base import ExceptionContext, ScrubwireError


class ConfigurationError(ScrubwireError):
    """Base class for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration contains invalid values."""

    def __init__(self, field: str, value: Any, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        message = f"Invalid configuration for '{field}': got {repr(value)}, expected {expected}"
        help_text = f"Please check the configuration for '{field}' and ensure it matches the expected format: {expected}"
        user_action = "Run 'scrubwire config --show' to inspect the effective configuration"
        context = ExceptionContext(
            help_text=help_text,
            error_code="CONFIG_INVALID",
            user_action=user_action
        )
        super().__init__(message, context)


class MissingConfigurationError(ConfigurationError):
    """Raised when a required configuration source is missing."""

    def __init__(self, field: str, config_location: Optional[str] = None):
        self.field = field
        message = f"Missing required configuration: '{field}'"
        help_text = "Create the file or drop the option to use built-in defaults"
        if config_location:
            help_text += f" (looked in {config_location})"
        context = ExceptionContext(
            help_text=help_text,
            error_code="CONFIG_MISSING"
        )
        super().__init__(message, context)


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        message = "Configuration validation failed:"
        for error in errors:
            message += f"\n  - {error}"

        help_text = "Please check your configuration file and fix the validation errors listed above"
        context = ExceptionContext(
            help_text=help_text,
            error_code="CONFIG_VALIDATION",
        )
        super().__init__(message, context)
