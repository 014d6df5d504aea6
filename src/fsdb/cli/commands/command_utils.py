"""utility functions for commands"""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from fsdb.config import SyncConfig
from fsdb.utils import setup_logging

console = Console()

DirOption = typer.Option(
    None,
    "--dir",
    "-d",
    help="Folder to keep in sync.",
    envvar="FSDB_WATCH_FOLDER",
    show_envvar=True,
)
DbOption = typer.Option(
    None,
    "--db",
    help="SQLite database file.",
    envvar="FSDB_DB_PATH",
    show_envvar=True,
)


def load_config(watch_folder: Optional[Path], db_path: Optional[Path]) -> SyncConfig:
    """Build the config from CLI options, falling back to FSDB_* settings.

    Also configures logging for the command.
    """
    overrides = {}
    if watch_folder is not None:
        overrides["watch_folder"] = watch_folder
    if db_path is not None:
        overrides["db_path"] = db_path

    try:
        config = SyncConfig(**overrides)
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(1)

    setup_logging(
        env=config.env,
        log_level=config.log_level,
        log_file=config.log_path,
        console=config.env != "test",
    )
    return config


def relative_path(path: str, root: Path) -> str:
    """Show a path relative to the watch folder when it is inside it."""
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path
