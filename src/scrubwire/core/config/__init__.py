"""
Configuration management for scrubwire.

Key Features:
- Pydantic-based configuration models with validation
- TOML file support with environment variable overrides
- Builders for the runtime sanitizer and interceptor settings

Usage:
    from scrubwire.core.config import ConfigManager

    config = ConfigManager().load_config()
    sanitizer_config = config.build_sanitizer_config()
"""

from ...exceptions.config import (
    ConfigurationError,
    ConfigurationValidationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from .manager import DEFAULT_CONFIG_FILE, ConfigManager
from .models import (
    InterceptorSection,
    LoggingSection,
    LogLevel,
    SanitizerSection,
    ScrubwireConfig,
    ScrubwireSettings,
)


def get_config_manager(config_file=None):
    """Get a config manager instance."""
    return ConfigManager(config_file)


__all__ = [
    # Configuration models
    "ScrubwireConfig",
    "SanitizerSection",
    "InterceptorSection",
    "LoggingSection",
    "LogLevel",
    "ScrubwireSettings",
    # Configuration management
    "ConfigManager",
    "DEFAULT_CONFIG_FILE",
    "get_config_manager",
    # Exceptions
    "ConfigurationError",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "ConfigurationValidationError",
]
