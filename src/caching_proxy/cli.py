"""Command-line entry point.

    caching-proxy <listen-port> <target-url> [options]

Options fall back to the environment (see caching_proxy.config). A
malformed target URL or port is reported and the process exits non-zero
before anything is served.
"""

import dataclasses
from typing import Optional

import typer
import uvicorn

from caching_proxy.api.app import create_app
from caching_proxy.config import CACHE_BACKENDS, get_settings, parse_target_url
from caching_proxy.exceptions import ConfigurationError

EXIT_CONFIGURATION_ERROR = 2

app = typer.Typer(
    name="caching-proxy",
    help="Reverse proxy that caches GET/HEAD responses on disk.",
    add_completion=False,
)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=EXIT_CONFIGURATION_ERROR)


@app.command()
def serve(
    port: int = typer.Argument(..., help="Port to listen on, e.g. 8080."),
    target_url: str = typer.Argument(..., help="Origin base URL, e.g. https://api.example.com."),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (default: PROXY_HOST or 0.0.0.0)."),
    cache_dir: Optional[str] = typer.Option(None, "--cache-dir", help="Directory for cache entries (file backend)."),
    backend: Optional[str] = typer.Option(None, "--backend", help=f"Cache backend: {' or '.join(CACHE_BACKENDS)}."),
    redis_url: Optional[str] = typer.Option(None, "--redis-url", help="Redis URL (redis backend)."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Upstream timeout in seconds."),
) -> None:
    """Start the caching proxy in front of TARGET_URL."""
    try:
        parse_target_url(target_url)
    except ConfigurationError as e:
        _fail(str(e))

    overrides = {
        "host": host,
        "cache_dir": cache_dir,
        "cache_backend": backend,
        "redis_url": redis_url,
        "upstream_timeout": timeout,
    }
    try:
        settings = dataclasses.replace(
            get_settings(),
            port=port,
            target_url=target_url,
            **{name: value for name, value in overrides.items() if value is not None},
        )
    except ValueError as e:
        _fail(str(e))

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


def main() -> None:
    """Console-script entry point."""
    app()
