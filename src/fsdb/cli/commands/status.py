"""Status command for fsdb CLI."""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Set

import typer
from loguru import logger
from rich.panel import Panel
from rich.tree import Tree

from fsdb.cli.app import app
from fsdb.cli.commands.command_utils import DbOption, DirOption, console, load_config, relative_path
from fsdb.config import SyncConfig
from fsdb.manager import FileSyncManager
from fsdb.sync.utils import SyncReport


def add_files_to_tree(
    tree: Tree, paths: Set[str], style: str, root: Path, checksums: Optional[Dict[str, str]] = None
):
    """Add files to tree, grouped by directory."""
    by_dir: Dict[str, list] = {}
    for path in sorted(paths):
        rel_path = relative_path(path, root)
        parts = rel_path.rsplit("/", 1)
        dir_name = parts[0] if len(parts) > 1 else ""
        file_name = parts[-1]
        by_dir.setdefault(dir_name, []).append((file_name, path))

    for dir_name, files in sorted(by_dir.items()):
        if dir_name:
            branch = tree.add(f"[bold]{dir_name}/[/bold]")
        else:
            branch = tree

        for file_name, full_path in sorted(files):
            if checksums and full_path in checksums:
                checksum_short = checksums[full_path][:8]
                branch.add(f"[{style}]{file_name}[/{style}] ({checksum_short})")
            else:
                branch.add(f"[{style}]{file_name}[/{style}]")


def display_changes(title: str, changes: SyncReport, root: Path, verbose: bool = False):
    """Display pending changes, summarized per top-level directory or in full."""
    tree = Tree(title)

    if changes.total_changes == 0:
        tree.add("No changes")
        console.print(Panel(tree, expand=False))
        return

    if not verbose:
        by_dir: Dict[str, Dict[str, int]] = {}
        for change_type, paths in [
            ("new", changes.new),
            ("modified", changes.modified),
            ("deleted", changes.deleted),
        ]:
            for path in paths:
                rel_path = relative_path(path, root)
                dir_name = rel_path.split("/", 1)[0] if "/" in rel_path else "."
                by_dir.setdefault(dir_name, {"new": 0, "modified": 0, "deleted": 0})
                by_dir[dir_name][change_type] += 1

        for dir_name, counts in sorted(by_dir.items()):
            summary_parts = []
            if counts["new"]:
                summary_parts.append(f"[green]+{counts['new']} new[/green]")
            if counts["modified"]:
                summary_parts.append(f"[yellow]~{counts['modified']} modified[/yellow]")
            if counts["deleted"]:
                summary_parts.append(f"[red]-{counts['deleted']} deleted[/red]")

            tree.add(f"[bold]{dir_name}/[/bold] {' '.join(summary_parts)}")

    else:
        summary = []
        if changes.new:
            summary.append(f"[green]{len(changes.new)} new[/green]")
        if changes.modified:
            summary.append(f"[yellow]{len(changes.modified)} modified[/yellow]")
        if changes.deleted:
            summary.append(f"[red]{len(changes.deleted)} deleted[/red]")
        tree.add(f"Found {', '.join(summary)}")

        if changes.new:
            new_branch = tree.add("[green]New Files[/green]")
            add_files_to_tree(new_branch, changes.new, "green", root, changes.checksums)

        if changes.modified:
            mod_branch = tree.add("[yellow]Modified[/yellow]")
            add_files_to_tree(mod_branch, changes.modified, "yellow", root, changes.checksums)

        if changes.deleted:
            del_branch = tree.add("[red]Deleted[/red]")
            add_files_to_tree(del_branch, changes.deleted, "red", root)

    console.print(Panel(tree, expand=False))


async def run_status(config: SyncConfig, verbose: bool = False) -> SyncReport:
    """Check sync status of files vs database without changing anything."""
    manager = FileSyncManager(config)
    try:
        manager.validate_config()
        await manager.initialize_database()
        assert manager.sync_service is not None
        changes = await manager.sync_service.scan(config.watch_folder)
        tracked = await manager.file_repository.count()
    finally:
        await manager.shutdown()

    console.print(f"{tracked} files tracked in {config.db_path}")
    display_changes(str(config.watch_folder), changes, config.watch_folder, verbose)
    return changes


@app.command()
def status(
    watch_folder: Optional[Path] = DirOption,
    db_path: Optional[Path] = DbOption,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed file information"),
):
    """Show sync status between files and database."""
    config = load_config(watch_folder, db_path)
    try:
        asyncio.run(run_status(config, verbose))
    except Exception as e:
        logger.error(f"Error checking status: {e}")
        typer.echo(f"Error checking status: {e}", err=True)
        raise typer.Exit(1)
