"""Watch command: sync once, then follow filesystem changes until stopped."""

import asyncio
import contextlib
import signal
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from fsdb.cli.app import app
from fsdb.cli.commands.command_utils import DbOption, DirOption, console, load_config, relative_path
from fsdb.cli.commands.sync import display_sync_summary
from fsdb.config import SyncConfig
from fsdb.manager import FileSyncManager
from fsdb.schemas import FileAction, FileEvent


def display_event(event: FileEvent, root: Path):
    """Print one applied change."""
    timestamp = event.timestamp.isoformat(timespec="seconds")
    path = relative_path(event.path, root)
    checksum = f" ({event.record.checksum[:8]})" if event.record else ""

    if event.action == FileAction.ADDED:
        console.print(f"{timestamp} Added:\t [green]{path}[/green]{checksum}")
    elif event.action == FileAction.UPDATED:
        console.print(f"{timestamp} Updated:\t [yellow]{path}[/yellow]{checksum}")
    else:
        console.print(f"{timestamp} Removed:\t [red]{path}[/red]")


async def print_events(queue: asyncio.Queue[FileEvent], root: Path):
    while True:
        event = await queue.get()
        display_event(event, root)


async def run_watch(config: SyncConfig, stop_event: Optional[asyncio.Event] = None):
    """Start the manager and keep it running until SIGINT/SIGTERM or ``stop_event``."""
    stop_event = stop_event or asyncio.Event()
    loop = asyncio.get_running_loop()

    signals = (signal.SIGINT, signal.SIGTERM)
    for sig in signals:
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    manager = FileSyncManager(config)
    printer = asyncio.create_task(print_events(manager.subscribe(), config.watch_folder))
    try:
        report = await manager.start()
        display_sync_summary(report)
        console.print("[cyan]Watching for changes... Press Ctrl+C to stop[/cyan]")

        await stop_event.wait()
        console.print("Shutting down...")
    finally:
        await manager.shutdown()
        printer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await printer
        for sig in signals:
            with contextlib.suppress(NotImplementedError):
                loop.remove_signal_handler(sig)

    console.print("File sync manager shut down successfully")


@app.command()
def watch(
    watch_folder: Optional[Path] = DirOption,
    db_path: Optional[Path] = DbOption,
) -> None:
    """Sync the folder, then keep the database updated as files change."""
    config = load_config(watch_folder, db_path)

    console.print("File Sync Manager Starting...")
    console.print(f"Watch Folder: {config.watch_folder}")
    console.print(f"Database Path: {config.db_path}")

    try:
        asyncio.run(run_watch(config))
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        typer.echo(f"Failed to start application: {e}", err=True)
        raise typer.Exit(1)
