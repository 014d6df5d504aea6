"""Tests for the fsdb CLI commands."""

import asyncio
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from fsdb.cli.commands import command_utils
from fsdb.cli.commands import status as status_module
from fsdb.cli.commands import sync as sync_module
from fsdb.cli.commands import watch as watch_module
from fsdb.cli.commands.status import display_changes
from fsdb.cli.commands.sync import display_sync_summary
from fsdb.cli.commands.watch import run_watch
from fsdb.cli.main import app
from fsdb.config import SyncConfig
from fsdb.sync.utils import SyncReport

runner = CliRunner()


@pytest.fixture
def console(monkeypatch):
    """Capture rich output from the command modules."""
    output = StringIO()
    test_console = Console(file=output, width=200)
    for module in (command_utils, status_module, sync_module, watch_module):
        monkeypatch.setattr(module, "console", test_console)
    return output


def test_sync_command(watch_dir: Path, db_path: Path, console):
    (watch_dir / "a.txt").write_text("a")
    (watch_dir / "b.txt").write_text("b")

    result = runner.invoke(app, ["sync", "--dir", str(watch_dir), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "Synced 2 files" in console.getvalue()
    assert db_path.exists()

    result = runner.invoke(app, ["sync", "--dir", str(watch_dir), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "Everything up to date" in console.getvalue()


def test_sync_command_from_environment(watch_dir: Path, db_path: Path, console, monkeypatch):
    (watch_dir / "a.txt").write_text("a")
    monkeypatch.setenv("FSDB_WATCH_FOLDER", str(watch_dir))
    monkeypatch.setenv("FSDB_DB_PATH", str(db_path))

    result = runner.invoke(app, ["sync", "--verbose"])

    assert result.exit_code == 0, result.output
    assert "a.txt" in console.getvalue()


def test_sync_command_missing_folder(tmp_path: Path, db_path: Path, console):
    result = runner.invoke(app, ["sync", "--dir", str(tmp_path / "missing"), "--db", str(db_path)])

    assert result.exit_code == 1
    assert "Error during sync" in result.output


def test_status_command(watch_dir: Path, db_path: Path, console):
    (watch_dir / "a.txt").write_text("a")

    result = runner.invoke(app, ["status", "--dir", str(watch_dir), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    output = console.getvalue()
    assert "0 files tracked" in output
    assert "+1 new" in output

    runner.invoke(app, ["sync", "--dir", str(watch_dir), "--db", str(db_path)])
    result = runner.invoke(app, ["status", "--dir", str(watch_dir), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "1 files tracked" in console.getvalue()
    assert "No changes" in console.getvalue()


def test_watch_command_bad_folder(tmp_path: Path, db_path: Path, console):
    result = runner.invoke(app, ["watch", "--dir", str(tmp_path / "missing"), "--db", str(db_path)])

    assert result.exit_code == 1
    assert "Failed to start application" in result.output
    assert "Watch Folder:" in console.getvalue()


def test_display_sync_summary(console):
    report = SyncReport(total=5, new={"/w/a"}, modified={"/w/b", "/w/c"}, deleted={"/w/d"})

    display_sync_summary(report)

    assert "Synced 4 files (1 new, 2 modified, 1 deleted)" in console.getvalue()


def test_display_changes_compact(console):
    root = Path("/w")
    report = SyncReport(new={"/w/docs/a.txt", "/w/docs/b.txt"}, deleted={"/w/old.txt"})

    display_changes("Status", report, root, verbose=False)

    output = console.getvalue()
    assert "docs/" in output
    assert "+2 new" in output
    assert "-1 deleted" in output


def test_display_changes_verbose(console):
    root = Path("/w")
    report = SyncReport(modified={"/w/docs/a.txt"})

    display_changes("Status", report, root, verbose=True)

    output = console.getvalue()
    assert "Modified" in output
    assert "a.txt" in output


@pytest.mark.asyncio
async def test_run_watch_until_stopped(sync_config: SyncConfig, watch_dir: Path, console):
    (watch_dir / "a.txt").write_text("a")
    stop_event = asyncio.Event()
    stop_event.set()

    await run_watch(sync_config, stop_event)

    output = console.getvalue()
    assert "Synced 1 files" in output
    assert "Watching for changes" in output
    assert "File sync manager shut down successfully" in output
