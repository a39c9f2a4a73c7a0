"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read, Update operations that model-specific CRUD
classes inherit. Updates are single UPDATE ... RETURNING statements so a
conditional write and the row it produced come from one atomic operation.

Dependencies: sqlalchemy, uuid
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vecta.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """
        Retrieve a single record by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_where(
        self,
        session: AsyncSession,
        id: UUID,
        criteria: Sequence[Any] = (),
        **values,
    ) -> ModelT | None:
        """
        Update a record by primary key if it also matches extra criteria.

        Args:
            session: Async database session
            id: UUID primary key
            criteria: Additional WHERE clauses (e.g. allowed source status)
            **values: Column values or SQL expressions to set

        Returns:
            The updated row as it is after the UPDATE, None if no row matched
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id, *criteria)
            .values(**values)
            .returning(self.model)
            .execution_options(populate_existing=True, synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
