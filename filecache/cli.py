"""CLI interface for filecache."""

import json
import logging
import time
from datetime import UTC, datetime
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from filecache.consts import DEFAULT_BIN, PERMANENT
from filecache.settings import StorageSettings
from filecache.storage.cache.codecs import get_codec
from filecache.storage.cache.file_caching import FileCache
from filecache.storage.cache.key_encoder import encode_cid
from filecache.storage.directory_manager import StorageDirectoryManager

app = typer.Typer(
    name="filecache",
    help="filecache - Inspect and maintain file-per-entry cache bins",
)

console = Console()

BinOption = typer.Option(DEFAULT_BIN, "--bin", "-b", help="Cache bin (namespace)")
StorageDirOption = typer.Option(None, "--storage-dir", help="Storage root (overrides FILECACHE_* settings)")
EmbeddedOption = typer.Option(False, "--embedded", help="Use the experimental embedded codec")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _open_cache(bin: str, storage_dir: str | None, embedded: bool) -> FileCache:
    """Build a FileCache for a bin from CLI options and environment settings."""
    settings = StorageSettings(storage_dir=Path(storage_dir)) if storage_dir else StorageSettings()
    codec = get_codec("embedded" if embedded else settings.codec)

    try:
        return FileCache(bin=bin, directories=StorageDirectoryManager(settings), codec=codec)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _format_timestamp(timestamp: int) -> str:
    if timestamp == PERMANENT:
        return "permanent"
    return datetime.fromtimestamp(timestamp, UTC).isoformat()


@app.command()
def get(
    cid: str = typer.Argument(..., help="Cache ID"),
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    embedded: bool = EmbeddedOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show a cached entry."""
    _configure_logging(verbose)
    cache = _open_cache(bin, storage_dir, embedded)

    entry = cache.get(cid)
    if entry is None:
        console.print(f"[yellow]Cache miss:[/yellow] {cid}")
        return

    console.print(f"[bold]{cid}[/bold] ({entry.cid})")
    console.print(f"Created: {_format_timestamp(entry.created)}")
    console.print(f"Expires: {_format_timestamp(entry.expire)}")
    console.print_json(json.dumps(entry.data))


@app.command("set")
def set_(
    cid: str = typer.Argument(..., help="Cache ID"),
    value: str = typer.Argument(..., help="JSON value to cache"),
    expire: int = typer.Option(None, "--expire", "-e", help="Seconds until expiration (default: permanent)"),
    raw: bool = typer.Option(False, "--raw", help="Store VALUE as a plain string instead of JSON"),
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    embedded: bool = EmbeddedOption,
    verbose: bool = VerboseOption,
) -> None:
    """Store a value in the cache."""
    _configure_logging(verbose)

    if raw:
        data = value
    else:
        try:
            data = json.loads(value)
        except json.JSONDecodeError as e:
            console.print(f"[red]Error:[/red] VALUE is not valid JSON ({e.msg}). Use --raw for plain strings.")
            raise typer.Exit(1)

    if expire is not None and expire <= 0:
        console.print("[red]Error:[/red] --expire must be a positive number of seconds")
        raise typer.Exit(1)

    cache = _open_cache(bin, storage_dir, embedded)
    expire_at = PERMANENT if expire is None else int(time.time()) + expire
    cache.set(cid, data, expire_at)
    console.print(f"[green]Stored {cid}[/green] (expires: {_format_timestamp(expire_at)})")


@app.command()
def delete(
    cids: list[str] = typer.Argument(..., help="Cache IDs to delete"),
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    embedded: bool = EmbeddedOption,
    verbose: bool = VerboseOption,
) -> None:
    """Delete one or more entries."""
    _configure_logging(verbose)
    cache = _open_cache(bin, storage_dir, embedded)
    cache.delete_multiple(cids)
    console.print(f"[green]Deleted {len(cids)} cache IDs from {bin}[/green]")


@app.command("delete-prefix")
def delete_prefix(
    prefix: str = typer.Argument(..., help="Cache ID prefix"),
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    embedded: bool = EmbeddedOption,
    verbose: bool = VerboseOption,
) -> None:
    """Delete every entry whose cache ID starts with PREFIX."""
    _configure_logging(verbose)
    cache = _open_cache(bin, storage_dir, embedded)
    cache.delete_prefix(prefix)
    console.print(f"[green]Deleted entries with prefix '{prefix}' from {bin}[/green]")


@app.command()
def flush(
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = VerboseOption,
) -> None:
    """Delete every entry in a bin."""
    _configure_logging(verbose)
    if not yes:
        typer.confirm(f"Flush all entries in bin '{bin}'?", abort=True)

    cache = _open_cache(bin, storage_dir, False)
    cache.flush()
    console.print(f"[green]Flushed {bin}[/green]")


@app.command()
def gc(
    bin: str = BinOption,
    storage_dir: str = StorageDirOption,
    embedded: bool = EmbeddedOption,
    verbose: bool = VerboseOption,
) -> None:
    """Reclaim expired entries in a bin."""
    _configure_logging(verbose)
    cache = _open_cache(bin, storage_dir, embedded)
    reclaimed = cache.garbage_collection()
    console.print(f"Reclaimed {reclaimed} entries from {bin}")
    if cache.is_empty():
        console.print("[dim]Bin is empty.[/dim]")


@app.command()
def stats(
    bins: list[str] | None = typer.Argument(None, help="Bins to report (default: the default bin)"),
    storage_dir: str = StorageDirOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show entry counts per bin."""
    _configure_logging(verbose)

    table = Table(title="Cache Bins")
    table.add_column("Bin", style="cyan")
    table.add_column("Entries", justify="right", style="magenta")
    table.add_column("Permanent", justify="right")
    table.add_column("Expiring", justify="right")
    table.add_column("Expired", justify="right", style="red")
    table.add_column("Size", justify="right", style="dim")

    for bin in bins or [DEFAULT_BIN]:
        bin_stats = _open_cache(bin, storage_dir, False).stats()
        table.add_row(
            bin,
            str(bin_stats.entries),
            str(bin_stats.permanent_entries),
            str(bin_stats.markers),
            str(bin_stats.expired_markers),
            f"{bin_stats.total_bytes:,} B",
        )

    console.print(table)


@app.command()
def encode(cid: str = typer.Argument(..., help="Cache ID")) -> None:
    """Show the file name a cache ID is stored under."""
    console.print(encode_cid(cid), markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
