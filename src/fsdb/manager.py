"""Owns the database and watcher for one watched folder."""

import asyncio
from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fsdb import db
from fsdb.config import SyncConfig
from fsdb.db import DatabaseType
from fsdb.exceptions import ConfigurationError
from fsdb.ignore_utils import IgnoreRules
from fsdb.repository import FileRepository
from fsdb.schemas import FileEvent
from fsdb.sync.events import ChangeNotifier
from fsdb.sync.sync_service import SyncService
from fsdb.sync.utils import SyncReport
from fsdb.sync.watch_service import WatchService


class FileSyncManager:
    """Keeps a SQLite table in sync with a folder.

    ``start()`` opens the database, runs a full sync and then begins watching.
    ``shutdown()`` stops the watcher and disposes the database engine; it is
    safe to call any number of times, including after a failed ``start()``.

    Can be used as an async context manager::

        async with FileSyncManager(config) as manager:
            events = manager.subscribe()
            ...
    """

    def __init__(self, config: SyncConfig, db_type: DatabaseType = DatabaseType.FILESYSTEM):
        self.config = config
        self.db_type = db_type
        self.ignore = IgnoreRules.from_config(config)
        self.notifier = ChangeNotifier()

        self._engine: Optional[AsyncEngine] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self.file_repository: Optional[FileRepository] = None
        self.sync_service: Optional[SyncService] = None
        self.watch_service: Optional[WatchService] = None

    async def __aenter__(self) -> "FileSyncManager":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()

    def validate_config(self) -> None:
        """Check the watch folder and database path before touching either.

        Raises:
            ConfigurationError: If the folder is missing or not a directory, or
                the database path is a directory
        """
        watch_folder = self.config.watch_folder
        if not watch_folder.exists():
            raise ConfigurationError(f"Watch folder does not exist: {watch_folder}")
        if not watch_folder.is_dir():
            raise ConfigurationError(f"Watch folder is not a directory: {watch_folder}")
        if self.config.db_path.is_dir():
            raise ConfigurationError(f"Database path is a directory: {self.config.db_path}")

    async def initialize_database(self) -> None:
        """Open the database and create the files table if needed."""
        if self._engine is not None:
            return

        try:
            self._engine, self._session_maker = await db.open_db(
                self.config.db_path, db_type=self.db_type
            )
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

        self.file_repository = FileRepository(self._session_maker)
        self.sync_service = SyncService(
            config=self.config,
            file_repository=self.file_repository,
            notifier=self.notifier,
            ignore=self.ignore,
        )
        self.watch_service = WatchService(
            sync_service=self.sync_service,
            config=self.config,
            ignore=self.ignore,
        )
        logger.info("Database initialized successfully")

    def _require_sync_service(self) -> SyncService:
        if self.sync_service is None:
            raise RuntimeError("Database not initialized")
        return self.sync_service

    async def perform_initial_sync(self) -> SyncReport:
        """Reconcile the whole folder with the database."""
        return await self._require_sync_service().sync(self.config.watch_folder)

    async def start_watching(self) -> None:
        self._require_sync_service()
        assert self.watch_service is not None
        await self.watch_service.start()
        logger.info("File watcher started successfully")

    async def stop_watching(self) -> None:
        if self.watch_service is not None:
            await self.watch_service.stop()

    async def close_database(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_maker = None
            logger.info("Database connection closed")

    async def start(self) -> SyncReport:
        """Initialize, run the full sync, then start watching.

        Nothing is watched unless the full sync succeeded. On failure every
        handle opened so far is released and the error is raised.
        """
        try:
            self.validate_config()
            await self.initialize_database()
            report = await self.perform_initial_sync()
            await self.start_watching()
        except Exception as e:
            logger.error(f"Failed to start file sync manager: {e}")
            await self.shutdown()
            raise

        logger.info("File sync manager started successfully")
        return report

    async def shutdown(self) -> None:
        """Stop watching and close the database. Idempotent."""
        if self._engine is None and not (self.watch_service and self.watch_service.running):
            return

        logger.info("Shutting down file sync manager...")
        await self.stop_watching()
        await self.close_database()
        logger.info("File sync manager shut down successfully")

    async def run_until_stopped(self, stop_event: asyncio.Event) -> None:
        """Start, wait for ``stop_event``, then shut down."""
        await self.start()
        try:
            await stop_event.wait()
        finally:
            await self.shutdown()

    def subscribe(self) -> asyncio.Queue[FileEvent]:
        """Queue receiving every added, updated and removed event."""
        return self.notifier.subscribe()

    def unsubscribe(self, queue: asyncio.Queue[FileEvent]) -> None:
        self.notifier.unsubscribe(queue)
