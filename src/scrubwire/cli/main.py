#!/usr/bin/env python3
"""scrubwire CLI main entry point."""

import logging
from pathlib import Path
from typing import Optional

import click

from . import __version__
from ..core.config import ConfigManager
from ..exceptions import ScrubwireError
from ..logging import LoggingConfig, configure_logging
from .commands import config, sanitize


def setup_logging(config_file: Optional[Path] = None, verbose: int = 0) -> None:
    """Set up logging from the configuration file, if it can be loaded."""
    try:
        logging_config = ConfigManager(config_file).load_config().logging.to_logging_config(
            version=__version__
        )
    except ScrubwireError:
        # The failing command reports the problem; log with defaults until then
        logging_config = LoggingConfig(level=logging.WARNING, version=__version__)

    if verbose:
        logging_config.level = logging.DEBUG if verbose > 1 else logging.INFO
    configure_logging(logging_config)


@click.group()
@click.version_option(version=__version__, prog_name="scrubwire")
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Configuration file path"
)
@click.option(
    "--verbose", "-v",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG)"
)
@click.pass_context
def cli(ctx: click.Context, config: Optional[Path], verbose: int) -> None:
    """scrubwire: redact secrets from HTTP traffic before it reaches a log.

    \b
    Examples:
        scrubwire sanitize body.json -t application/json
        scrubwire headers "Authorization: Bearer abc123def456ghi"
        scrubwire url "https://user:pw@api.example.com/v1?token=abc"
        scrubwire config --show
    """
    setup_logging(config, verbose)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


cli.add_command(sanitize.sanitize)
cli.add_command(sanitize.headers)
cli.add_command(sanitize.url)
cli.add_command(config.config)


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
