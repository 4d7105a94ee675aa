"""Click CLI for streamnet: call the Streamyyy API and manage the local cache."""

from __future__ import annotations

import json
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from streamnet.cache.manager import PersistentCache
from streamnet.config.schema import NetworkSettings, load_settings
from streamnet.errors.exceptions import StreamNetError
from streamnet.types import CachePolicy

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level; ``-v`` flags beat the config."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _parse_query(pairs: tuple[str, ...]) -> dict[str, str]:
    query: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--query")
        query[key] = value
    return query


@click.group()
@click.version_option(package_name="streamnet")
def cli() -> None:
    """streamnet: resilient, cached client for the Streamyyy API."""


@cli.command()
@click.argument("path")
@click.option("-q", "--query", "query", multiple=True, help="Query parameter as key=value.")
@click.option(
    "--policy",
    type=click.Choice([p.value for p in CachePolicy]),
    default=CachePolicy.RETURN_CACHE_ELSE_LOAD.value,
    show_default=True,
    help="Cache policy for this request.",
)
@click.option("--no-cache", is_flag=True, default=False, help="Disable caching.")
@click.option("--base-url", type=str, default=None, help="Override the API base URL.")
@click.option("--retries", type=int, default=None, help="Retries for transient failures.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def get(
    path: str,
    query: tuple[str, ...],
    policy: str,
    no_cache: bool,
    base_url: str | None,
    retries: int | None,
    verbose: int,
) -> None:
    """GET an API path and print the JSON response."""
    try:
        settings = load_settings()
    except ValueError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)
    _setup_logging(verbose, settings.log_level)

    from streamnet.core import fetch

    try:
        result = fetch(
            path,
            query=_parse_query(query),
            cache_policy=CachePolicy(policy),
            no_cache=no_cache,
            base_url=base_url,
            max_retries=retries,
        )
    except StreamNetError as e:
        error_console.print(f"[red]Error ({e.error_type}):[/red] {e}")
        if e.user_retryable:
            error_console.print("[yellow]This may succeed if you try again.[/yellow]")
        sys.exit(1)

    console.print_json(json.dumps(result))


@cli.group()
def cache() -> None:
    """Cache management commands."""


def _open_cache() -> PersistentCache:
    settings = load_settings()
    return PersistentCache(
        root=settings.cache_dir,
        memory_max_items=settings.cache_memory_items,
        memory_max_mb=settings.cache_memory_mb,
    )


@cache.command("stats")
def cache_stats() -> None:
    """Show cache statistics."""
    mgr = _open_cache()

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = mgr.stats()
    table.add_row("Location", str(mgr.root))
    table.add_row("Entries", str(stats.entries))
    table.add_row("Size (MB)", f"{stats.size_mb:.1f}")

    console.print(table)


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear() -> None:
    """Clear all cached data."""
    mgr = _open_cache()
    mgr.clear_all()
    console.print("[green]Cache cleared.[/green]")


@cache.command("sweep")
def cache_sweep() -> None:
    """Remove expired entries."""
    mgr = _open_cache()
    removed = mgr.sweep_expired()
    console.print(f"[green]Removed {removed} expired entries.[/green]")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("show")
def config_show() -> None:
    """Show the resolved configuration."""
    try:
        settings = load_settings()
    except ValueError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    table = Table(title="Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in _display_rows(settings):
        table.add_row(key, value)
    console.print(table)


def _display_rows(settings: NetworkSettings) -> list[tuple[str, str]]:
    rows = []
    for key, value in settings.model_dump(exclude={"rate_limits"}).items():
        if key == "api_token" and value:
            value = "****"
        rows.append((key, str(value)))
    for host, quota in sorted(settings.rate_limits.items()):
        rows.append(
            (f"rate_limits.{host}", f"{quota.max_requests}/{quota.window_seconds:g}s")
        )
    return rows


def main() -> None:
    """Entry point for the CLI."""
    cli()
