"""
Configuration manager for scrubwire.

Loads ``ScrubwireConfig`` from a TOML file, applies ``SCRUBWIRE_*``
environment overrides and validates the result. Configuration can be
written back (``save_config`` / ``export_config``) as TOML.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w
from pydantic import ValidationError

from ...exceptions.base import ExceptionContext
from ...exceptions.config import (
    ConfigurationError,
    ConfigurationValidationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from .models import ScrubwireConfig, ScrubwireSettings

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "scrubwire" / "config.toml"


@dataclass
class EnvironmentOverride:
    """Helper for applying environment variable overrides."""
    config_section: Dict[str, Any]
    settings: ScrubwireSettings

    def apply_if_set(self, setting_name: str, config_key: str) -> None:
        """Apply setting if it's set in environment."""
        value = getattr(self.settings, setting_name, None)
        if value is not None:
            self.config_section[config_key] = value

    def apply_string_if_set(self, setting_name: str, config_key: str) -> None:
        """Apply string setting if it's set in environment."""
        value = getattr(self.settings, setting_name, None)
        if value:
            self.config_section[config_key] = value

    def apply_list_if_set(self, setting_name: str, config_key: str) -> None:
        """Apply a comma-separated setting as a list."""
        value = getattr(self.settings, setting_name, None)
        if value:
            self.config_section[config_key] = [item.strip() for item in value.split(",") if item.strip()]


def _format_validation_error(error: ValidationError):
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "config"
        messages.append(f"{location}: {item['msg']}")
    return messages


class ConfigManager:
    """Loads, validates and persists scrubwire configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to a config file. When given, the file must
                exist. When None, ``~/.config/scrubwire/config.toml`` is used
                if present and built-in defaults otherwise.
        """
        self._explicit = config_file is not None
        self.config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        self._config: Optional[ScrubwireConfig] = None

    def load_config(self) -> ScrubwireConfig:
        """Load and validate configuration from file and environment."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        if self.config_file.exists():
            config_data = self._load_toml_file()
        elif self._explicit:
            raise MissingConfigurationError("config_file", str(self.config_file))

        config_data = self._apply_env_overrides(config_data)

        try:
            self._config = ScrubwireConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(_format_validation_error(e)) from e
        except (ValueError, TypeError) as e:
            raise ConfigurationValidationError([f"Configuration validation failed: {e}"]) from e

        return self._config

    def _load_toml_file(self) -> Dict[str, Any]:
        """Load configuration from TOML file."""

        def load_toml_content(f):
            try:
                return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise InvalidConfigurationError(
                    str(self.config_file),
                    f"Invalid TOML syntax: {e}",
                    "valid TOML format"
                ) from e

        return self._file_operation(load_toml_content, mode="rb", operation_name="read")

    def _file_operation(self, operation: Callable[[Any], Any], mode: str, operation_name: str, path: Optional[Path] = None):
        """Run ``operation`` on an open file, mapping OS errors to configuration errors."""
        path = path or self.config_file
        try:
            with open(path, mode) as f:
                return operation(f)
        except PermissionError as e:
            raise ConfigurationError(
                f"Permission denied trying to {operation_name} configuration file {path}: {e}",
                ExceptionContext(help_text=f"Check file permissions for {path}", error_code="CONFIG_ACCESS"),
            ) from e
        except FileNotFoundError as e:
            raise MissingConfigurationError("config_file", str(path)) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to {operation_name} configuration file {path}: {e}",
                ExceptionContext(error_code="CONFIG_ACCESS"),
            ) from e

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration."""
        settings = ScrubwireSettings()

        self._initialize_config_sections(config_data)
        self._apply_sanitizer_env_overrides(config_data, settings)
        self._apply_interceptor_env_overrides(config_data, settings)
        self._apply_logging_env_overrides(config_data, settings)

        return config_data

    def _initialize_config_sections(self, config_data: Dict[str, Any]) -> None:
        """Initialize nested configuration dictionaries if they don't exist."""
        for section in ("sanitizer", "interceptor", "logging"):
            if section not in config_data:
                config_data[section] = {}

    def _apply_sanitizer_env_overrides(
        self,
        config_data: Dict[str, Any],
        settings: ScrubwireSettings
    ) -> None:
        """Apply sanitizer environment variable overrides."""
        override = EnvironmentOverride(config_data["sanitizer"], settings)

        override.apply_string_if_set("scrubwire_mask", "mask")
        override.apply_if_set("scrubwire_max_body_size", "max_body_size")
        override.apply_string_if_set("scrubwire_header_mask_mode", "header_mask_mode")
        override.apply_string_if_set("scrubwire_detection", "detection")

        # Extra fields from the environment add to the file's list
        section = config_data["sanitizer"]
        from_file = list(section.get("extra_sensitive_fields", []))
        override.apply_list_if_set("scrubwire_extra_sensitive_fields", "extra_sensitive_fields")
        if settings.scrubwire_extra_sensitive_fields:
            section["extra_sensitive_fields"] = from_file + section["extra_sensitive_fields"]

    def _apply_interceptor_env_overrides(
        self,
        config_data: Dict[str, Any],
        settings: ScrubwireSettings
    ) -> None:
        """Apply interceptor environment variable overrides."""
        override = EnvironmentOverride(config_data["interceptor"], settings)
        override.apply_if_set("scrubwire_verbose", "verbose")

    def _apply_logging_env_overrides(self, config_data: Dict[str, Any], settings: ScrubwireSettings) -> None:
        """Apply logging environment variable overrides."""
        override = EnvironmentOverride(config_data["logging"], settings)

        override.apply_string_if_set("scrubwire_logging_level", "level")
        override.apply_string_if_set("scrubwire_logging_format", "format")
        override.apply_list_if_set("scrubwire_logging_output", "output")
        override.apply_string_if_set("scrubwire_logging_file_path", "file_path")

    def _remove_none_values(self, data):
        """Recursively remove None values, which TOML cannot represent."""
        if isinstance(data, dict):
            return {k: self._remove_none_values(v) for k, v in data.items() if v is not None}
        elif isinstance(data, list):
            return [self._remove_none_values(item) for item in data if item is not None]
        else:
            return data

    def save_config(self, config: Optional[ScrubwireConfig] = None) -> None:
        """Save configuration to the manager's TOML file."""
        self.export_config(self.config_file, config)
        if config is not None:
            self._config = config

    def export_config(self, file_path: Path, config: Optional[ScrubwireConfig] = None) -> None:
        """Write configuration to ``file_path`` as TOML."""
        if config is None:
            config = self.load_config()

        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create configuration directory {file_path.parent}: {e}",
                ExceptionContext(help_text="Check that you have write permissions", error_code="CONFIG_ACCESS"),
            ) from e

        config_dict = self._remove_none_values(config.model_dump(mode="json"))

        def write_toml_content(f):
            tomli_w.dump(config_dict, f)

        self._file_operation(write_toml_content, mode="wb", operation_name="write", path=file_path)
