# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

from typing import Annotated

import typer

from foliocache.cli.commands import cache as cache_cmd

app = typer.Typer(
    name="foliocache",
    help="Content caching and invalidation service",
    no_args_is_help=True,
)

app.add_typer(cache_cmd.app, name="cache", help="Inspect and manage a running server's cache")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the API server."""
    import uvicorn

    from foliocache.core.config import get_settings
    from foliocache.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        "foliocache.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_config=None,
    )


@app.command()
def version() -> None:
    """Show the installed version."""
    from foliocache import __version__

    typer.echo(f"foliocache {__version__}")


if __name__ == "__main__":
    app()
