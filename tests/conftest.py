"""Common test fixtures."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fsdb import db
from fsdb.config import SyncConfig
from fsdb.db import DatabaseType
from fsdb.ignore_utils import IgnoreRules
from fsdb.repository import FileRepository
from fsdb.sync.events import ChangeNotifier
from fsdb.sync.sync_service import SyncService
from fsdb.sync.watch_service import WatchService


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Keep tests from writing log files or configuring logfire."""
    monkeypatch.setenv("FSDB_ENV", "test")


@pytest.fixture
def watch_dir(tmp_path) -> Path:
    """Empty folder to sync, resolved the same way the config resolves it."""
    path = tmp_path / "watched"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def db_path(tmp_path) -> Path:
    return (tmp_path / "data" / "files.db").resolve()


@pytest.fixture
def sync_config(watch_dir, db_path) -> SyncConfig:
    """Config with no settle delay so handlers run immediately."""
    return SyncConfig(
        env="test",
        watch_folder=watch_dir,
        db_path=db_path,
        sync_delay=0,
        watch_debounce=50,
    )


@pytest_asyncio.fixture(scope="function")
async def engine_factory(
    db_path,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Special version of the engine factory that uses an in-memory database."""
    async with db.engine_session_factory(db_path=db_path, db_type=DatabaseType.MEMORY) as (
        engine,
        session_maker,
    ):
        yield engine, session_maker


@pytest_asyncio.fixture
async def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    """Get session maker for tests."""
    _, session_maker = engine_factory
    return session_maker


@pytest_asyncio.fixture
async def file_repository(session_maker: async_sessionmaker[AsyncSession]) -> FileRepository:
    return FileRepository(session_maker)


@pytest.fixture
def ignore_rules(sync_config) -> IgnoreRules:
    return IgnoreRules.from_config(sync_config)


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest_asyncio.fixture
async def sync_service(
    sync_config: SyncConfig,
    file_repository: FileRepository,
    notifier: ChangeNotifier,
    ignore_rules: IgnoreRules,
) -> SyncService:
    return SyncService(
        config=sync_config,
        file_repository=file_repository,
        notifier=notifier,
        ignore=ignore_rules,
    )


@pytest_asyncio.fixture
async def watch_service(
    sync_service: SyncService, sync_config: SyncConfig, ignore_rules: IgnoreRules
) -> WatchService:
    return WatchService(sync_service=sync_service, config=sync_config, ignore=ignore_rules)
