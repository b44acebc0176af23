"""Configuration inspection command."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...core.config import ConfigManager, ScrubwireConfig
from ...exceptions import ConfigurationError
from ..error_handlers import handle_cli_errors
from ..utils import load_config

console = Console()


@click.command()
@click.option(
    "--show",
    is_flag=True,
    help="Show the effective configuration"
)
@click.option(
    "--export",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the effective configuration to a TOML file"
)
@click.pass_context
@handle_cli_errors
def config(ctx: click.Context, show: bool, export: Optional[Path]) -> None:
    """Inspect or export the effective configuration.

    File values are overridden by SCRUBWIRE_* environment variables.

    \b
    Examples:
        scrubwire config --show
        scrubwire --config ./scrubwire.toml config --export effective.toml
    """
    effective = load_config(ctx)

    if export:
        try:
            ConfigManager(ctx.obj.get("config_file")).export_config(export, effective)
        except OSError as e:
            raise ConfigurationError(f"Cannot export configuration: {e}") from e
        console.print(f"[green]Configuration exported to {escape(str(export))}[/green]")
        return

    show_configuration(effective, ctx.obj.get("config_file"))


def show_configuration(config: ScrubwireConfig, config_file: Optional[Path]) -> None:
    """Display the effective configuration."""
    sanitizer = config.build_sanitizer_config()

    table = Table(title="scrubwire Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    rows = [
        ("Config File", str(config_file) if config_file else "(defaults)"),
        ("Mask", sanitizer.mask),
        ("Max Body Size", str(sanitizer.max_body_size)),
        ("Detection", sanitizer.detection.value),
        ("Detectors", ", ".join(p.name for p in sanitizer.sensitive_patterns)),
        ("Header Mask Mode", sanitizer.header_mask_mode.value),
        ("Scan Header Values", str(sanitizer.scan_header_values)),
        ("Sensitive Fields", str(len(sanitizer.sensitive_fields))),
        ("Sensitive Headers", ", ".join(sorted(sanitizer.sensitive_headers))),
        ("Max Nesting Depth", str(sanitizer.max_nesting_depth)),
        ("Log Request Body", str(config.interceptor.log_request_body)),
        ("Log Response Body", str(config.interceptor.log_response_body)),
        ("Log Headers", str(config.interceptor.log_headers)),
        ("Verbose", str(config.interceptor.verbose)),
        ("Logging", f"{config.logging.level.value} / {config.logging.format}"),
    ]
    for setting, value in rows:
        table.add_row(setting, escape(value))

    console.print(table)
