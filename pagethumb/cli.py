"""CLI commands for pagethumb."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pagethumb.client import PageThumbClient
from pagethumb.errors import PageThumbError
from pagethumb.models import ThumbnailConfig

console = Console()
err_console = Console(stderr=True)


def _format_bytes(size: float) -> str:
    """Format bytes to human readable."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def build_config(config_file: str | None, overrides: dict[str, object]) -> ThumbnailConfig:
    """Load the YAML config (if any) and apply command line overrides."""
    config = ThumbnailConfig.from_yaml(Path(config_file)) if config_file else ThumbnailConfig()
    values = {k: v for k, v in overrides.items() if v is not None}
    if values:
        config = config.model_validate({**config.model_dump(), **values})
    return config


@click.group()
@click.option("--config", "config_file", default=None, type=click.Path(dir_okay=False),
              help="YAML configuration file")
@click.option("--cache-dir", "-d", default=None, help="Directory for cached images")
@click.option("--max-age", type=int, default=None, help="Max. age of cached images (s)")
@click.option("--format", "-f", "image_format", default=None,
              type=click.Choice(["png", "gif", "jpg", "jpeg", "svg"], case_sensitive=False),
              help="Output image format")
@click.option("--width", type=int, default=None, help="Screen width in pixels")
@click.option("--height", type=int, default=None, help="Screen height in pixels")
@click.option("--quality", type=click.IntRange(0, 100), default=None, help="Image quality")
@click.option("--javascript/--no-javascript", default=None, help="Run page JavaScript")
@click.option("--user-agent", default=None, help="User-Agent header to send")
@click.option("--binary", "binary_path", default=None, help="Path to wkhtmltoimage")
@click.option("--timeout", type=float, default=None, help="Render timeout (s)")
@click.option("--verbose", "-v", count=True, help="Increase log output")
@click.pass_context
def main(
    ctx: click.Context,
    config_file: str | None,
    cache_dir: str | None,
    max_age: int | None,
    image_format: str | None,
    width: int | None,
    height: int | None,
    quality: int | None,
    javascript: bool | None,
    user_agent: str | None,
    binary_path: str | None,
    timeout: float | None,
    verbose: int,
) -> None:
    """pagethumb - Cached web page thumbnails."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )

    try:
        config = build_config(config_file, {
            "cache_dir": cache_dir,
            "max_age": max_age,
            "image_format": image_format,
            "width": width,
            "height": height,
            "quality": quality,
            "javascript": javascript,
            "user_agent": user_agent,
            "binary_path": binary_path,
            "timeout": timeout,
        })
    except (PageThumbError, ValidationError) as e:
        raise click.BadParameter(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["client"] = PageThumbClient(config)
    ctx.call_on_close(ctx.obj["client"].close)


@main.command()
@click.argument("urls", nargs=-1, required=True)
@click.pass_context
def render(ctx: click.Context, urls: tuple[str, ...]) -> None:
    """Render URLs into cached thumbnails."""
    client: PageThumbClient = ctx.obj["client"]

    table = Table(title="Thumbnails")
    table.add_column("URL", style="cyan")
    table.add_column("File", style="green")
    table.add_column("Source", style="yellow")
    table.add_column("Size", justify="right")

    failed = 0
    for url in urls:
        try:
            with console.status(f"Rendering {url}..."):
                result = client.render(url)
        except PageThumbError as e:
            failed += 1
            table.add_row(url, f"[red]{type(e).__name__}: {e}[/red]", "-", "-")
            continue

        if result.cached:
            source = "cache"
        elif result.direct:
            source = "download"
        else:
            source = "rendered"
        table.add_row(url, result.filename, source, _format_bytes(result.size_bytes))

    console.print(table)
    console.print(f"[dim]Cache directory: {client.config.cache_dir}[/dim]")
    if failed:
        ctx.exit(1)


@main.command()
@click.argument("url")
@click.pass_context
def path(ctx: click.Context, url: str) -> None:
    """Print the cache file path of a URL."""
    client: PageThumbClient = ctx.obj["client"]
    click.echo(str(client.path_file(url)))


@main.command()
@click.argument("url")
@click.pass_context
def key(ctx: click.Context, url: str) -> None:
    """Print the cache key of a URL."""
    client: PageThumbClient = ctx.obj["client"]
    click.echo(client.thumb_key(url))


@main.command()
@click.argument("url")
@click.pass_context
def check(ctx: click.Context, url: str) -> None:
    """Check whether a fresh cached image exists for a URL."""
    client: PageThumbClient = ctx.obj["client"]
    file_path = client.path_file(url)

    if client.is_cached(url):
        size = file_path.stat().st_size
        console.print(f"[green]Fresh:[/green] {file_path} ({_format_bytes(size)})")
        return

    console.print(f"[yellow]Not cached:[/yellow] {file_path}")
    ctx.exit(1)


@main.command()
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=8000, help="Port to bind")
@click.option("--prefix", default="/pagethumb", help="API prefix")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, prefix: str) -> None:
    """Start the API server."""
    import uvicorn
    from fastapi import FastAPI

    from pagethumb.api import create_router

    client: PageThumbClient = ctx.obj["client"]

    app = FastAPI(title="pagethumb API")
    app.include_router(create_router(client, prefix=prefix))

    console.print(f"[green]Starting server at http://{host}:{port}{prefix}[/green]")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
