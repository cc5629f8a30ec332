"""CLI interface for Opusview.

Command-line tool for rendering Bilibili opus documents to HTML.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from opusview.config import Config

CONFIG_HELP = "Path to configuration file (default: auto-discover opusview.toml)"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


@click.group()
def cli() -> None:
    """Opusview - Bilibili opus documents rendered as HTML."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--cookie",
    default=None,
    help="Bilibili session cookie header (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (show render warnings)",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    cookie: str | None,
    verbose: bool,
) -> None:
    """Start the opus rendering server."""
    from opusview.server import run_server

    _configure_logging(verbose)
    config = Config.load(config_path).with_overrides(host=host, port=port, cookie=cookie)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    if config.server.default_opus_id:
        click.echo(f"Default opus: {config.server.default_opus_id}")
    if not config.bilibili.cookie:
        click.echo("Cookie: not set (some opus documents may be unavailable)")

    run_server(config, verbose=verbose)


@cli.command()
@click.argument("opus_id")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
@click.option(
    "--cookie",
    default=None,
    help="Bilibili session cookie header (overrides config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write HTML to this file instead of stdout",
)
@click.option(
    "--page/--fragment",
    default=False,
    help="Emit a complete HTML page instead of the bare fragment (default: fragment)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (show render warnings)",
)
def render(
    opus_id: str,
    config_path: Path | None,
    cookie: str | None,
    output: Path | None,
    page: bool,
    verbose: bool,
) -> None:
    """Fetch an opus by ID and render it to HTML."""
    import httpx

    _configure_logging(verbose)
    try:
        config = Config.load(config_path).with_overrides(cookie=cookie)
        result = asyncio.run(_fetch_and_render(opus_id, config))
    except (httpx.HTTPError, ValueError) as e:
        _fail(str(e))
        return

    _emit(result, config, output=output, page=page, verbose=verbose)


@cli.command("render-file")
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help=CONFIG_HELP,
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write HTML to this file instead of stdout",
)
@click.option(
    "--page/--fragment",
    default=False,
    help="Emit a complete HTML page instead of the bare fragment (default: fragment)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (show render warnings)",
)
def render_file(
    response_file: Path,
    config_path: Path | None,
    output: Path | None,
    page: bool,
    verbose: bool,
) -> None:
    """Render a saved opus detail API response (JSON) to HTML."""
    from opusview.core.renderer import OpusRenderer

    _configure_logging(verbose)
    try:
        config = Config.load(config_path)
        response = json.loads(response_file.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as e:
        _fail(str(e))
        return

    result = OpusRenderer(config.render).render_response(response)
    _emit(result, config, output=output, page=page, verbose=verbose)


async def _fetch_and_render(opus_id: str, config: Config):
    """Fetch and render one opus with a short-lived HTTP client."""
    from opusview.bilibili.client import BilibiliClient, create_http_client
    from opusview.core.renderer import OpusRenderer

    async with create_http_client(config.bilibili) as http_client:
        renderer = OpusRenderer(config.render, BilibiliClient(http_client, config.bilibili))
        return await renderer.render(opus_id)


def _emit(result, config: Config, *, output: Path | None, page: bool, verbose: bool) -> None:
    """Write a render result, or exit with an error when content is missing.

    Args:
        result: RenderResult or None
        config: Application config
        output: Target file, stdout when None
        page: Wrap the fragment in a complete HTML page
        verbose: Print render warnings
    """
    from opusview.page import render_page

    if result is None:
        _fail("Module content not found, check opus id and cookie settings")
        return

    if verbose:
        for warning in result.warnings:
            click.echo(click.style(f"[WARNING] {warning}", fg="yellow"), err=True)

    html = render_page(result.html, config.page, title=result.title) if page else result.html

    if output is None:
        click.echo(html)
        return

    output.write_text(html, encoding="utf-8")
    click.echo(click.style(f"Wrote {output}", fg="green"), err=True)


if __name__ == "__main__":
    cli()
