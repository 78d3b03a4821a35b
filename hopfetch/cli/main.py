"""
hopfetch CLI - Command Line Interface
"""

import asyncio
import logging
import click
from pathlib import Path
from typing import Optional

from hopfetch import __version__
from hopfetch.config import Config
from hopfetch.core import DownloadHandle, download_file, fetch_text, format_size
from hopfetch.exceptions import HopFetchError


def _load_config(max_redirects: Optional[int], timeout: Optional[float]) -> Config:
    config = Config.load()
    if max_redirects is not None:
        config.max_redirects = max_redirects
    if timeout is not None:
        config.timeout = timeout
    return config


def _parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {value!r}", param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


@click.group()
@click.version_option(version=__version__, prog_name="hopfetch")
@click.option("-v", "--verbose", is_flag=True, help="Log every hop")
def cli(verbose: bool):
    """hopfetch - fetch and download URLs, following redirects and refreshes"""
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )


@cli.command()
@click.argument("url")
@click.option("-X", "--method", default="GET", help="Request method")
@click.option("-H", "--header", "headers", multiple=True, help="Extra header, 'Name: value'")
@click.option("-d", "--data", help="Request body")
@click.option("--data-type", default="application/octet-stream", help="Content type of --data")
@click.option("--max-redirects", type=int, help="Maximum redirects/refreshes to follow")
@click.option("--timeout", type=float, help="Deadline for the whole fetch in seconds")
def fetch(
    url: str,
    method: str,
    headers: tuple[str, ...],
    data: Optional[str],
    data_type: str,
    max_redirects: Optional[int],
    timeout: Optional[float],
):
    """Fetch URL and print its text content"""
    from rich.console import Console

    console = Console(stderr=True)
    config = _load_config(max_redirects, timeout)
    request_headers = _parse_headers(headers)

    try:
        text = asyncio.run(fetch_text(
            url,
            config=config,
            method=method,
            headers=request_headers,
            data=data.encode("utf-8") if data is not None else None,
            data_type=data_type,
        ))
    except HopFetchError as e:
        console.print(f"[bold red]❌ Error: {e}[/bold red]")
        raise SystemExit(1)

    if text is not None:
        click.echo(text, nl=not text.endswith("\n"))


@cli.command()
@click.argument("url")
@click.option("-o", "--output", help="Output filename (default: temporary file)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress output")
@click.option("--max-redirects", type=int, help="Maximum redirects/refreshes to follow")
@click.option("--timeout", type=float, help="Deadline for the whole download in seconds")
def download(
    url: str,
    output: Optional[str],
    quiet: bool,
    max_redirects: Optional[int],
    timeout: Optional[float],
):
    """Download URL to a file"""
    from rich.console import Console

    console = Console()
    config = _load_config(max_redirects, timeout)
    output_path = Path(output) if output else None

    if not quiet:
        console.print(f"[bold green]🚀 hopfetch v{__version__}[/bold green]")
        console.print(f"[dim]📥 URL:[/dim] {url}")

    try:
        handle = asyncio.run(_download_with_progress(url, output_path, config, quiet, console))
    except HopFetchError as e:
        console.print(f"\n[bold red]❌ Download failed: {e}[/bold red]")
        raise SystemExit(1)

    if quiet:
        click.echo(str(handle.path))
        return

    console.print(f"\n[bold green]✅ Download complete![/bold green] (HTTP {handle.status})")
    console.print(f"[dim]📁 Saved to:[/dim] {handle.path}")
    console.print(f"[dim]📊 Size:[/dim] {format_size(handle.bytes_written)}")


async def _download_with_progress(
    url: str,
    output_path: Optional[Path],
    config: Config,
    quiet: bool,
    console,
) -> DownloadHandle:
    """Download with a rich progress bar"""
    if quiet:
        return await download_file(url, output=output_path, config=config)

    from rich.progress import (
        Progress,
        SpinnerColumn,
        TextColumn,
        BarColumn,
        DownloadColumn,
        TransferSpeedColumn,
        TimeRemainingColumn,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.fields[filename]}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=console,
    )

    with progress:
        task_id = progress.add_task("Downloading", filename="…", total=None)

        def on_start(code: int, headers) -> None:
            length = headers.get("Content-Length")
            progress.update(
                task_id,
                completed=0,
                total=int(length) if length and length.isdigit() else None,
            )

        def on_data(handle: DownloadHandle) -> None:
            progress.update(task_id, filename=handle.path.name, completed=handle.bytes_written)

        handle = await download_file(
            url,
            output=output_path,
            config=config,
            on_start=on_start,
            on_data=on_data,
        )
        progress.update(task_id, filename=handle.path.name, completed=handle.bytes_written)
        return handle


@cli.command()
def config():
    """Show current configuration"""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    cfg = Config.load()

    table = Table(title="hopfetch Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("User Agent", cfg.user_agent)
    table.add_row("Accept", cfg.accept)
    table.add_row("Max Redirects", "unlimited" if cfg.max_redirects is None else str(cfg.max_redirects))
    table.add_row("Timeout", "none" if cfg.timeout is None else f"{cfg.timeout}s")
    table.add_row("Download Directory", cfg.download_dir or "(system temp)")
    table.add_row("Temp Prefix", cfg.temp_prefix)
    table.add_row("Default Filename", cfg.default_filename)

    console.print(table)


if __name__ == "__main__":
    cli()
