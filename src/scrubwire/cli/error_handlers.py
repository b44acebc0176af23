"""
Centralized error handling for the CLI.

Library errors are rendered by click as ``Error: ...`` with exit code 1.
"""

import functools
import logging

import click

from ..exceptions import ConfigurationError, ScrubwireError

logger = logging.getLogger(__name__)


def handle_cli_errors(func):
    """Decorator turning scrubwire errors into click errors."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            logger.debug("Configuration error %s", e.correlation_id, exc_info=True)
            raise click.ClickException(f"Configuration problem: {e}") from e
        except ScrubwireError as e:
            logger.debug("Command failed %s", e.correlation_id, exc_info=True)
            raise click.ClickException(str(e)) from e

    return wrapper
