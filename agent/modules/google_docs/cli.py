"""Command-line entry point for the Google Docs MCP server."""

from __future__ import annotations

import asyncio
import sys

import click

from shared.config import get_settings
from shared.logging_config import configure_logging


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


@click.group()
def cli():
    """Google Docs MCP server."""
    pass


@cli.command()
def stdio():
    """Serve MCP over stdin/stdout."""
    from modules.google_docs.service import serve_stdio

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        run_async(serve_stdio(settings))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Port (default: PORT or 8080).")
def http(host: str | None, port: int | None):
    """Serve MCP over HTTP (POST /mcp)."""
    import uvicorn

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    click.echo(f"{settings.server_display_name} listening on http://{host}:{port}/mcp", err=True)

    async def _serve():
        config = uvicorn.Config(
            "modules.google_docs.main:app",
            host=host,
            port=port,
            log_level=settings.log_level.lower(),
            proxy_headers=True,
            forwarded_allow_ips="*",
        )
        server = uvicorn.Server(config)
        await server.serve()

    try:
        run_async(_serve())
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


@cli.command()
def tools():
    """List the tools this server exposes."""
    from modules.google_docs.manifest import MANIFEST

    for tool in MANIFEST.tools:
        click.echo(f"  {tool.name:<26} {tool.description}")
    click.echo(f"\n{len(MANIFEST.tools)} tools")


if __name__ == "__main__":
    cli()
