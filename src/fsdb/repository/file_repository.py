"""Repository for file record operations."""

import os
from typing import Optional

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fsdb import db
from fsdb.file_utils import FileSnapshot
from fsdb.models import FileRecord
from fsdb.repository.repository import Repository


class FileRepository(Repository[FileRecord]):
    """Repository for the ``files`` table, keyed by absolute file path."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__(session_maker, FileRecord)

    async def get_by_path(self, file_path: str) -> Optional[FileRecord]:
        """Find a record by its file path."""
        query = self.select().where(FileRecord.file_path == file_path)
        return await self.find_one(query)

    async def get_all_file_paths(self) -> list[str]:
        """Return every stored path without loading full records."""
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(self.select(FileRecord.file_path))
            return list(result.scalars().all())

    async def insert(self, snapshot: FileSnapshot) -> FileRecord:
        """Insert a new record.

        Raises:
            IntegrityError: If a record for the path already exists
        """
        return await self.create(
            {
                "file_path": snapshot.file_path,
                "size": snapshot.size,
                "modified_time": snapshot.modified_time,
                "checksum": snapshot.checksum,
            }
        )

    async def update_by_path(self, snapshot: FileSnapshot) -> Optional[FileRecord]:
        """Update the record for ``snapshot.file_path``.

        Returns:
            The updated record, or None when no record exists for the path.
            Any other failure is raised.
        """
        query = (
            update(FileRecord)
            .where(FileRecord.file_path == snapshot.file_path)
            .values(
                size=snapshot.size,
                modified_time=snapshot.modified_time,
                checksum=snapshot.checksum,
            )
            .returning(FileRecord)
            .execution_options(synchronize_session=False)
        )
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(query)
            return result.scalars().one_or_none()

    async def delete_by_path(self, file_path: str) -> bool:
        """Delete the record for a path. Returns False if there was none."""
        return await self.delete_by_fields(file_path=file_path)

    async def delete_under(self, directory: str) -> list[str]:
        """Delete every record below ``directory``.

        The prefix match is case-sensitive, so a sibling directory whose name
        differs only in case keeps its records.

        Returns:
            The removed paths, sorted
        """
        prefix = directory.rstrip(os.sep) + os.sep
        query = (
            delete(FileRecord)
            .where(func.substr(FileRecord.file_path, 1, len(prefix)) == prefix)
            .returning(FileRecord.file_path)
            .execution_options(synchronize_session=False)
        )
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(query)
            return sorted(result.scalars().all())
