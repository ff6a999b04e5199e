# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache management CLI commands.

Statistics live in the server process, so these commands talk to the admin
API of a running server rather than to the cache backend directly.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

import httpx
import typer

app = typer.Typer()

UrlOption = Annotated[
    str | None,
    typer.Option("--url", help="Server base URL (default: from FOLIOCACHE_API_HOST/PORT)"),
]


def _base_url(url: str | None) -> str:
    if url:
        return url.rstrip("/")
    from foliocache.core.config import get_settings

    settings = get_settings()
    return f"http://{settings.api_host}:{settings.api_port}"


async def _request(method: str, url: str | None, path: str) -> dict[str, Any]:
    async with httpx.AsyncClient(base_url=_base_url(url), timeout=30.0) as client:
        try:
            resp = await client.request(method, f"/api/admin{path}")
        except httpx.HTTPError as exc:
            typer.echo(f"Cannot reach server: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    try:
        body: dict[str, Any] = resp.json()
    except ValueError:
        body = {}
    if resp.is_error:
        typer.echo(f"Error {resp.status_code}: {body.get('detail', resp.text)}", err=True)
        raise typer.Exit(code=1)
    return body


@app.command()
def stats(url: UrlOption = None) -> None:
    """Show cache hit/miss counts and backend availability."""
    asyncio.run(_async_stats(url))


async def _async_stats(url: str | None) -> None:
    from rich.console import Console
    from rich.table import Table

    data = await _request("GET", url, "/cache/stats")

    console = Console()
    table = Table(title="Cache Statistics")
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Backend", str(data["backend_availability"]))
    table.add_row("Hits", str(data["hits"]))
    table.add_row("Misses", str(data["misses"]))
    table.add_row("Total Requests", str(data["total"]))
    table.add_row("Hit Rate", f"{data['hit_rate']:.2%}")
    table.add_row("Invalidations", str(data["invalidations"]))
    console.print(table)

    policy = Table(title="Cache Policy")
    policy.add_column("Content Type", style="bold")
    policy.add_column("Prefix")
    policy.add_column("TTL Class")
    policy.add_column("TTL (s)", justify="right")
    for name, row in data.get("policy", {}).items():
        policy.add_row(name, row["prefix"], row["ttl_class"], str(row["ttl_seconds"]))
    console.print(policy)


@app.command()
def invalidate(
    content_type: Annotated[str, typer.Argument(help="Content type, e.g. blog")],
    url: UrlOption = None,
) -> None:
    """Invalidate every cached entry of one content type."""
    data = asyncio.run(_request("POST", url, f"/cache/invalidate/{content_type}"))
    typer.echo(data["message"])


@app.command("invalidate-all")
def invalidate_all(url: UrlOption = None) -> None:
    """Invalidate all content types."""
    data = asyncio.run(_request("POST", url, "/cache/invalidate-all"))
    typer.echo(data["message"])


@app.command()
def warm(url: UrlOption = None) -> None:
    """Pre-load every registered content collection."""
    data = asyncio.run(_request("POST", url, "/cache/warm"))
    typer.echo(data["message"])
    for name, error in data.get("failed", {}).items():
        typer.echo(f"  {name}: {error}", err=True)


@app.command("reset-stats")
def reset_stats(url: UrlOption = None) -> None:
    """Zero the server's hit/miss counters."""
    data = asyncio.run(_request("POST", url, "/cache/reset-stats"))
    typer.echo(data["message"])
