"""Service for syncing files between filesystem and database."""

import asyncio
from pathlib import Path
from typing import Dict, Optional, Tuple

import logfire
from loguru import logger

from fsdb.config import SyncConfig
from fsdb.file_utils import file_snapshot, normalize_path
from fsdb.ignore_utils import IgnoreRules
from fsdb.models import FileRecord
from fsdb.repository import FileRepository
from fsdb.schemas import FileEvent
from fsdb.sync.change_detector import has_file_changed
from fsdb.sync.events import ChangeNotifier
from fsdb.sync.scanner import scan_directory
from fsdb.sync.utils import SyncReport


class SyncService:
    """Keeps the ``files`` table in line with the watch folder.

    ``sync`` reconciles the whole tree; ``handle_add_or_change`` and
    ``handle_remove`` apply single watch events. Both paths use the same
    snapshot and change-detection functions.
    """

    def __init__(
        self,
        config: SyncConfig,
        file_repository: FileRepository,
        notifier: Optional[ChangeNotifier] = None,
        ignore: Optional[IgnoreRules] = None,
    ):
        self.config = config
        self.file_repository = file_repository
        self.notifier = notifier or ChangeNotifier()
        self.ignore = ignore or IgnoreRules.from_config(config)

    async def _plan(self, directory: Path) -> Tuple[SyncReport, Dict[str, FileRecord]]:
        """Diff the directory against stored records without writing anything."""
        current_files = await scan_directory(directory, ignore=self.ignore)
        logger.info(f"Found {len(current_files)} files in filesystem")

        db_records = {r.file_path: r for r in await self.file_repository.find_all()}
        logger.info(f"Found {len(db_records)} records in database")

        report = SyncReport(total=len(current_files))
        semaphore = asyncio.Semaphore(self.config.sync_concurrency)

        async def check(path: str) -> None:
            async with semaphore:
                db_record = db_records.get(path)
                if db_record is None:
                    report.snapshots[path] = await file_snapshot(path)
                    report.new.add(path)
                elif await has_file_changed(path, db_record):
                    report.snapshots[path] = await file_snapshot(path)
                    report.modified.add(path)

        # every decision resolves before deletions are considered
        results = await asyncio.gather(
            *(check(path) for path in current_files), return_exceptions=True
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            if len(errors) > 1:
                logger.error(f"{len(errors)} files failed during scan")
            raise errors[0]

        report.deleted = set(db_records) - current_files

        logger.debug(f"Changes found: {report.total_changes}")
        logger.debug(f"  New: {len(report.new)}")
        logger.debug(f"  Modified: {len(report.modified)}")
        logger.debug(f"  Deleted: {len(report.deleted)}")
        return report, db_records

    async def scan(self, directory: Optional[Path] = None) -> SyncReport:
        """Report what a sync would change, without applying it."""
        directory = directory or self.config.watch_folder
        report, _ = await self._plan(directory)
        return report

    async def sync(self, directory: Optional[Path] = None) -> SyncReport:
        """Reconcile all files under ``directory`` with the database.

        Inserts records for new files, updates records whose size, mtime or
        checksum changed and deletes records for files no longer on disk.
        Any failure aborts the pass and is raised to the caller.
        """
        directory = directory or self.config.watch_folder
        logger.info(f"Starting initial sync for: {directory}")

        with logfire.span("sync", directory=str(directory)):
            try:
                report, db_records = await self._plan(directory)

                for path in sorted(report.new):
                    await self.insert_record(path, report)

                for path in sorted(report.modified):
                    await self.update_record(db_records[path], report)

                for path in sorted(report.deleted):
                    await self.remove_record(path)

            except Exception as e:
                logger.error(f"Initial sync failed: {e}")
                raise

        logger.info(
            f"Initial sync completed: {report.total_changes} changes "
            f"(new={len(report.new)}, modified={len(report.modified)}, "
            f"deleted={len(report.deleted)})"
        )
        return report

    async def insert_record(self, path: str, report: SyncReport) -> FileRecord:
        record = await self.file_repository.insert(report.snapshots[path])
        logger.info(f"Added: {path}")
        self.notifier.publish(FileEvent.added(record))
        return record

    async def update_record(self, db_record: FileRecord, report: SyncReport) -> FileRecord:
        """Update an existing record in place, keeping its id."""
        snapshot = report.snapshots[db_record.file_path]
        record = await self.file_repository.update(
            db_record.id,
            {
                "size": snapshot.size,
                "modified_time": snapshot.modified_time,
                "checksum": snapshot.checksum,
            },
        )
        if record is None:
            # an update for an absent path becomes an insert
            return await self.insert_record(db_record.file_path, report)

        logger.info(f"Updated: {record.file_path}")
        self.notifier.publish(FileEvent.updated(record))
        return record

    async def remove_record(self, path: str) -> bool:
        deleted = await self.file_repository.delete_by_path(path)
        if deleted:
            logger.info(f"Removed: {path}")
            self.notifier.publish(FileEvent.removed(path))
        return deleted

    async def handle_add_or_change(self, path: str | Path) -> FileEvent:
        """Apply an add or change event for a single file.

        Waits ``sync_delay`` seconds so editors that write in several steps
        have settled, then snapshots the file. The record is updated if one
        exists and inserted otherwise. Only "no such record" falls back to
        insert; any other error is raised.

        Returns:
            The published added or updated event
        """
        file_path = normalize_path(path)

        with logfire.span("handle_add_or_change", path=file_path):
            if self.config.sync_delay:
                await asyncio.sleep(self.config.sync_delay)

            snapshot = await file_snapshot(file_path)

            record = await self.file_repository.update_by_path(snapshot)
            if record is not None:
                logger.info(f"Updated: {file_path}")
                event = FileEvent.updated(record)
            else:
                record = await self.file_repository.insert(snapshot)
                logger.info(f"Added: {file_path}")
                event = FileEvent.added(record)

        self.notifier.publish(event)
        return event

    async def handle_remove(self, path: str | Path) -> bool:
        """Apply a remove event.

        A path with no record of its own is treated as a removed directory and
        the records of every file below it are deleted.

        Returns:
            False if nothing was tracked at or below the path
        """
        file_path = normalize_path(path)
        with logfire.span("handle_remove", path=file_path):
            if await self.remove_record(file_path):
                return True

            removed = await self.file_repository.delete_under(file_path)
            for removed_path in removed:
                logger.info(f"Removed: {removed_path}")
                self.notifier.publish(FileEvent.removed(removed_path))

        if not removed:
            logger.debug(f"No record to remove for {file_path}")
        return bool(removed)
