import asyncio
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
    async_scoped_session,
)
from sqlalchemy.pool import StaticPool

from fsdb.models import Base


class DatabaseType(Enum):
    """Types of supported databases."""

    MEMORY = auto()
    FILESYSTEM = auto()

    @classmethod
    def get_db_url(cls, db_path: Path, db_type: "DatabaseType") -> str:
        """Get SQLAlchemy URL for database path."""
        if db_type == cls.MEMORY:
            logger.info("Using in-memory SQLite database")
            return "sqlite+aiosqlite://"

        return f"sqlite+aiosqlite:///{db_path}"


def get_scoped_session_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> async_scoped_session:
    """Create a scoped session factory scoped to current task."""
    return async_scoped_session(session_maker, scopefunc=asyncio.current_task)


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a scoped session with proper lifecycle management.

    Commits when the block exits cleanly, rolls back and re-raises otherwise.

    Args:
        session_maker: Session maker to create scoped sessions from
    """
    factory = get_scoped_session_factory(session_maker)
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await factory.remove()


async def init_db(session: AsyncSession):
    """Initialize database with required tables."""
    conn = await session.connection()
    await conn.run_sync(Base.metadata.create_all)
    await session.commit()


def create_engine(db_path: Path, db_type: DatabaseType = DatabaseType.FILESYSTEM) -> AsyncEngine:
    """Create an async engine for the given database."""
    db_url = DatabaseType.get_db_url(db_path, db_type)
    logger.debug(f"Creating engine for db_url: {db_url}")
    if db_type == DatabaseType.MEMORY:
        # one shared connection, otherwise every session sees its own empty database
        return create_async_engine(
            db_url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    return create_async_engine(db_url, connect_args={"check_same_thread": False})


async def open_db(
    db_path: Path,
    db_type: DatabaseType = DatabaseType.FILESYSTEM,
    init: bool = True,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create engine and session factory, creating tables when ``init`` is set.

    The caller owns the engine and must ``dispose()`` it.
    """
    engine = create_engine(db_path, db_type)
    try:
        factory = async_sessionmaker(engine, expire_on_commit=False)

        if init:
            logger.debug("Initializing database...")
            async with scoped_session(factory) as db_session:
                await init_db(db_session)
    except Exception:
        await engine.dispose()
        raise

    return engine, factory


@asynccontextmanager
async def engine_session_factory(
    db_path: Path,
    db_type: DatabaseType = DatabaseType.FILESYSTEM,
    init: bool = True,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create engine and session factory."""
    engine, factory = await open_db(db_path, db_type, init)
    try:
        yield engine, factory
    finally:
        await engine.dispose()
