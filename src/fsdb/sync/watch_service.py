"""Watch service for fsdb."""

import asyncio
import os
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from loguru import logger
from pydantic import BaseModel, Field
from watchfiles import awatch, Change

from fsdb.config import SyncConfig
from fsdb.file_utils import normalize_path
from fsdb.ignore_utils import IgnoreRules
from fsdb.sync.scanner import scan_directory
from fsdb.sync.sync_service import SyncService

# queue item: None wakes the consumer up on shutdown
QueueItem = Optional[Tuple[Change, str]]


class WatchEvent(BaseModel):
    timestamp: datetime
    path: str
    action: str  # added, updated, removed
    status: str  # success, error
    checksum: Optional[str] = None
    error: Optional[str] = None


class WatchServiceState(BaseModel):
    # Service status
    running: bool = False
    start_time: datetime = Field(default_factory=datetime.now)
    pid: int = Field(default_factory=os.getpid)

    # Stats
    error_count: int = 0
    last_error: Optional[datetime] = None
    last_event: Optional[datetime] = None

    # Events handled successfully
    synced_files: int = 0

    # Recent activity
    recent_events: List[WatchEvent] = Field(default_factory=list)

    def add_event(
        self,
        path: str,
        action: str,
        status: str,
        checksum: Optional[str] = None,
        error: Optional[str] = None,
    ) -> WatchEvent:
        event = WatchEvent(
            timestamp=datetime.now(),
            path=path,
            action=action,
            status=status,
            checksum=checksum,
            error=error,
        )
        self.recent_events.insert(0, event)
        self.recent_events = self.recent_events[:100]  # Keep last 100
        self.last_event = event.timestamp
        return event

    def record_error(self, error: str, path: str = "", action: str = "sync"):
        self.error_count += 1
        self.add_event(path=path, action=action, status="error", error=error)
        self.last_error = datetime.now()


def collapse_changes(changes: Iterable[Tuple[Change, str]]) -> List[Tuple[Change, str]]:
    """Reduce one watcher batch to at most one change per path.

    A batch is an unordered set, so a path reported as both added and deleted
    is resolved by whether it exists now.
    """
    by_path: dict[str, Set[Change]] = {}
    for change, path in changes:
        by_path.setdefault(path, set()).add(change)

    collapsed = []
    for path, kinds in sorted(by_path.items()):
        if len(kinds) == 1:
            collapsed.append((next(iter(kinds)), path))
        elif Path(path).exists():
            kind = Change.modified if Change.modified in kinds else Change.added
            collapsed.append((kind, path))
        else:
            collapsed.append((Change.deleted, path))
    return collapsed


class WatchService:
    """Feeds watcher events through a queue to a single consumer.

    One producer task runs ``awatch`` and enqueues changes; one consumer task
    applies them in order, so no two events are ever in flight at once. A
    failing event is logged and dropped without stopping either task.
    """

    def __init__(self, sync_service: SyncService, config: SyncConfig, ignore: IgnoreRules):
        self.sync_service = sync_service
        self.config = config
        self.ignore = ignore
        self.state = WatchServiceState()
        self.status_path = config.status_path
        self.queue: asyncio.Queue[QueueItem] = asyncio.Queue()
        self._stop_event = asyncio.Event()
        self._producer: Optional[asyncio.Task] = None
        self._consumer: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """True while the watcher task is alive."""
        return self._producer is not None and not self._producer.done()

    async def start(self):
        """Start watching the folder in background tasks."""
        if self.running:
            return
        # clear out tasks left behind by a watcher that failed
        await self.stop()

        self._stop_event.clear()
        self.state.running = True
        self.state.start_time = datetime.now()
        await self.write_status()

        logger.info(f"Starting file watcher for: {self.config.watch_folder}")
        self._consumer = asyncio.create_task(self.consume(), name="fsdb-watch-consumer")
        self._producer = asyncio.create_task(self.run(), name="fsdb-watch-producer")

    async def stop(self):
        """Stop watching. Safe to call more than once.

        The event being handled is allowed to finish; events still queued are
        dropped.
        """
        if self._producer is None and self._consumer is None:
            return

        self._stop_event.set()
        producer, consumer = self._producer, self._consumer
        self._producer = self._consumer = None

        if producer is not None:
            await producer
        self.queue.put_nowait(None)
        if consumer is not None:
            await consumer

        self.state.running = False
        await self.write_status()
        logger.info("File watcher stopped")

    async def run(self):
        """Watch for file changes and queue them for the consumer."""
        try:
            async for changes in awatch(
                self.config.watch_folder,
                watch_filter=self.filter_changes,
                debounce=self.config.watch_debounce,
                recursive=True,
                stop_event=self._stop_event,
            ):
                for change, path in collapse_changes(changes):
                    self.queue.put_nowait((change, path))

        except Exception as e:
            logger.error(f"Watcher error: {e}")
            self.state.record_error(str(e), action="watch")
            self.state.running = False
            await self.write_status()

    async def consume(self):
        """Apply queued changes one at a time until stopped."""
        while True:
            item = await self.queue.get()
            try:
                if item is None:
                    return
                if self._stop_event.is_set():
                    logger.debug(f"Dropping event after shutdown: {item}")
                    continue
                await self.handle_change(*item)
            finally:
                self.queue.task_done()

    async def write_status(self):
        """Write current state to status file"""
        self.status_path.write_text(WatchServiceState.model_dump_json(self.state, indent=2))

    def filter_changes(self, change: Change, path: str) -> bool:
        """Return True for changes that should be synced."""
        return not self.ignore.should_ignore(path)

    async def handle_change(self, change: Change, path: str):
        """Apply one watcher change. Errors are logged and recorded, never raised.

        A directory that appears is reported as a single event, so its files
        are scanned and queued as individual additions.
        """
        file_path = normalize_path(path)
        p = Path(file_path)

        try:
            if change == Change.deleted:
                logger.debug(f"File deleted: {file_path}")
                if await self.sync_service.handle_remove(file_path):
                    self.state.add_event(path=file_path, action="removed", status="success")
                    self.state.synced_files += 1

            elif p.is_symlink():
                logger.debug(f"Skipping symlink: {file_path}")

            elif p.is_dir():
                if change == Change.added:
                    await self.queue_directory(file_path)

            else:
                logger.debug(f"File {'added' if change == Change.added else 'changed'}: {file_path}")
                event = await self.sync_service.handle_add_or_change(file_path)
                self.state.add_event(
                    path=file_path,
                    action=event.action.value,
                    status="success",
                    checksum=event.record.checksum if event.record else None,
                )
                self.state.synced_files += 1

        except Exception as e:
            logger.error(f"Failed to handle {change.name} for {file_path}: {e}")
            self.state.record_error(str(e), path=file_path, action=change.name)

        await self.write_status()

    async def queue_directory(self, directory: str):
        """Queue an addition for every file below a directory that appeared."""
        files = await scan_directory(Path(directory), ignore=self.ignore)
        logger.debug(f"Directory added: {directory} ({len(files)} files)")
        for path in sorted(files):
            self.queue.put_nowait((Change.added, path))
