"""Command module for one-shot fsdb sync."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.tree import Tree

from fsdb.cli.app import app
from fsdb.cli.commands.command_utils import DbOption, DirOption, console, load_config, relative_path
from fsdb.config import SyncConfig
from fsdb.manager import FileSyncManager
from fsdb.sync.utils import SyncReport


def display_sync_summary(report: SyncReport):
    """Display a one-line summary of sync changes."""
    total_changes = report.total_changes
    if total_changes == 0:
        console.print(f"[green]Everything up to date[/green] ({report.total} files)")
        return

    # Format as: "Synced X files (A new, B modified, C deleted)"
    changes = []
    if report.new:
        changes.append(f"[green]{len(report.new)} new[/green]")
    if report.modified:
        changes.append(f"[yellow]{len(report.modified)} modified[/yellow]")
    if report.deleted:
        changes.append(f"[red]{len(report.deleted)} deleted[/red]")

    console.print(f"Synced {total_changes} files ({', '.join(changes)})")


def display_detailed_sync_results(report: SyncReport, root: Path):
    """Display detailed sync results with trees."""
    if report.total_changes == 0:
        console.print(f"\n[green]Everything up to date[/green] ({report.total} files)")
        return

    console.print("\n[bold]Sync Results[/bold]")

    tree = Tree(f"[bold]{root}[/bold]")
    if report.new:
        created = tree.add("[green]Added[/green]")
        for path in sorted(report.new):
            checksum = report.checksums.get(path, "")
            created.add(f"[green]{relative_path(path, root)}[/green] ({checksum[:8]})")
    if report.modified:
        modified = tree.add("[yellow]Updated[/yellow]")
        for path in sorted(report.modified):
            checksum = report.checksums.get(path, "")
            modified.add(f"[yellow]{relative_path(path, root)}[/yellow] ({checksum[:8]})")
    if report.deleted:
        deleted = tree.add("[red]Removed[/red]")
        for path in sorted(report.deleted):
            deleted.add(f"[red]{relative_path(path, root)}[/red]")
    console.print(tree)


async def run_sync(config: SyncConfig, verbose: bool = False) -> SyncReport:
    """Run a single full sync without watching."""
    manager = FileSyncManager(config)
    try:
        manager.validate_config()
        await manager.initialize_database()
        report = await manager.perform_initial_sync()
    finally:
        await manager.shutdown()

    if verbose:
        display_detailed_sync_results(report, config.watch_folder)
    else:
        display_sync_summary(report)
    return report


@app.command()
def sync(
    watch_folder: Optional[Path] = DirOption,
    db_path: Optional[Path] = DbOption,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed sync information.",
    ),
) -> None:
    """Sync the folder with the database once and exit."""
    config = load_config(watch_folder, db_path)
    try:
        asyncio.run(run_sync(config, verbose))

    except Exception as e:
        logger.exception("Sync failed")
        typer.echo(f"Error during sync: {e}", err=True)
        raise typer.Exit(1)
