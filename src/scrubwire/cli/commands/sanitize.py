"""Sanitization commands: bodies, headers and URLs."""

from typing import Dict, List, Optional, Tuple

import click

from ...core.security import DetectionStrategy, HeaderMaskMode, Sanitizer
from ..error_handlers import handle_cli_errors
from ..utils import load_config, override_sanitizer


def _non_empty(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is not None and not value:
        raise click.BadParameter("must not be empty")
    return value


@click.command()
@click.argument("file", type=click.File("rb"), default="-")
@click.option(
    "--content-type", "-t",
    default="",
    help="Content-Type of the body (sniffed when omitted)"
)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in DetectionStrategy]),
    help="Secret detection strategy"
)
@click.option("--mask", callback=_non_empty, help="Replacement text for secrets")
@click.option(
    "--max-body-size",
    type=click.IntRange(min=1),
    help="Truncate bodies larger than this many bytes"
)
@click.pass_context
@handle_cli_errors
def sanitize(
    ctx: click.Context,
    file,
    content_type: str,
    strategy: Optional[str],
    mask: Optional[str],
    max_body_size: Optional[int],
) -> None:
    """Sanitize a request or response body read from FILE (stdin by default).

    \b
    Examples:
        scrubwire sanitize payload.json -t application/json
        curl -s https://api.example.com/me | scrubwire sanitize --strategy scan
    """
    config = override_sanitizer(
        load_config(ctx),
        {"detection": strategy, "mask": mask, "max_body_size": max_body_size},
    )
    sanitizer = Sanitizer(config.build_sanitizer_config())
    click.echo(sanitizer.sanitize_body(file.read(), content_type))


def parse_header(raw: str) -> Tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise click.BadParameter(f"expected NAME:VALUE, got {raw!r}", param_hint="HEADER")
    return name.strip(), value.strip()


@click.command()
@click.argument("header", nargs=-1, required=True)
@click.option(
    "--mode",
    type=click.Choice([m.value for m in HeaderMaskMode]),
    help="Mask whole values (full) or keep four characters at each end (partial)"
)
@click.pass_context
@handle_cli_errors
def headers(ctx: click.Context, header: Tuple[str, ...], mode: Optional[str]) -> None:
    """Sanitize HTTP headers given as NAME:VALUE arguments.

    \b
    Examples:
        scrubwire headers "Authorization: Bearer abc123def456" "Accept: */*"
    """
    collected: Dict[str, List[str]] = {}
    for raw in header:
        name, value = parse_header(raw)
        collected.setdefault(name, []).append(value)

    config = override_sanitizer(load_config(ctx), {"header_mask_mode": mode})
    sanitizer = Sanitizer(config.build_sanitizer_config())
    for name, value in sanitizer.sanitize_headers(collected).items():
        click.echo(f"{name}: {value}")


@click.command()
@click.argument("raw_url", metavar="URL")
@click.pass_context
@handle_cli_errors
def url(ctx: click.Context, raw_url: str) -> None:
    """Sanitize a URL: sensitive query parameters and embedded credentials."""
    sanitizer = Sanitizer(load_config(ctx).build_sanitizer_config())
    click.echo(sanitizer.sanitize_url(raw_url))
