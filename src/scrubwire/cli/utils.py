"""Shared helpers for CLI commands."""

from typing import Any, Dict

import click
from pydantic import ValidationError

from ..core.config import ConfigManager, SanitizerSection, ScrubwireConfig
from ..exceptions import ConfigurationValidationError


def load_config(ctx: click.Context) -> ScrubwireConfig:
    """Load configuration once per invocation."""
    ctx.ensure_object(dict)
    if "config" not in ctx.obj:
        ctx.obj["config"] = ConfigManager(ctx.obj.get("config_file")).load_config()
    return ctx.obj["config"]


def override_sanitizer(config: ScrubwireConfig, updates: Dict[str, Any]) -> ScrubwireConfig:
    """Return ``config`` with command-line options applied to ``[sanitizer]``."""
    updates = {key: value for key, value in updates.items() if value is not None}
    if not updates:
        return config

    try:
        section = SanitizerSection(**{**config.sanitizer.model_dump(), **updates})
    except ValidationError as e:
        raise ConfigurationValidationError(
            [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e
    return config.model_copy(update={"sanitizer": section})
