"""Base repository with generic CRUD operations."""

from typing import Type, Optional, Any, Sequence, TypeVar, Generic

from sqlalchemy import select, func, Select, Executable, inspect, Column, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fsdb import db
from fsdb.models import Base

T = TypeVar("T", bound=Base)


class Repository(Generic[T]):
    """Base repository implementation with generic CRUD operations.

    Every call runs in its own scoped session and commits on success, so each
    operation is atomic on its own and nothing spans calls.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], Model: Type[T]):
        self.session_maker = session_maker
        self.Model = Model
        self.primary_key: Column[Any] = inspect(self.Model).mapper.primary_key[0]
        self.valid_columns = [column.key for column in inspect(self.Model).columns]

    def select(self, *entities: Any) -> Select:
        """Start a select against this repository's model."""
        if not entities:
            entities = (self.Model,)
        return select(*entities)

    async def find_all(self) -> Sequence[T]:
        """Fetch all records from the table."""
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(self.select())
            return result.scalars().all()

    async def find_by_id(self, entity_id: int) -> Optional[T]:
        """Fetch a record by its primary key."""
        async with db.scoped_session(self.session_maker) as session:
            return await session.get(self.Model, entity_id)

    async def create(self, data: dict) -> T:
        """Create a new record from the provided data."""
        model_data = {k: v for k, v in data.items() if k in self.valid_columns}
        async with db.scoped_session(self.session_maker) as session:
            instance = self.Model(**model_data)
            session.add(instance)
            await session.flush()
            await session.refresh(instance)
            return instance

    async def update(self, entity_id: int, data: dict) -> Optional[T]:
        """Update a record with the given data. Returns None if it does not exist."""
        async with db.scoped_session(self.session_maker) as session:
            instance = await session.get(self.Model, entity_id)
            if instance is None:
                return None
            for key, value in data.items():
                if key in self.valid_columns:
                    setattr(instance, key, value)
            await session.flush()
            await session.refresh(instance)
            return instance

    async def delete_by_fields(self, **filters: Any) -> bool:
        """Delete records matching the given field values."""
        conditions = [getattr(self.Model, field) == value for field, value in filters.items()]
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(delete(self.Model).where(*conditions))
            return result.rowcount > 0  # pyright: ignore [reportAttributeAccessIssue]

    async def count(self, query: Executable | None = None) -> int:
        """Count records in the table."""
        if query is None:
            query = select(func.count()).select_from(self.Model)
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(query)
            scalar = result.scalar()
            return scalar if scalar is not None else 0

    async def find_one(self, query: Select) -> Optional[T]:
        """Execute a query and retrieve a single record."""
        async with db.scoped_session(self.session_maker) as session:
            result = await session.execute(query)
            return result.scalars().one_or_none()
