"""
Base repository with common persistence operations.

The Repository pattern separates data access logic from business logic,
making it easier to test and maintain.
"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from relay.exceptions import DatabaseError
from relay.logging import logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository providing create/read operations for one model type.

    SQLAlchemy errors are logged, the session is rolled back, and the error
    is re-raised as DatabaseError so callers never see driver exceptions.

    Attributes:
        session: The database session for executing queries.
        model: The SQLModel class this repository manages.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        self.session = session
        self.model = model

    async def get_all(self, **filters: Any) -> list[T]:
        """
        Get all entities matching the provided filters, ordered by id.

        Args:
            **filters: Field name and value pairs to filter by.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            stmt = select(self.model)
            for key, value in filters.items():
                if value is not None:
                    stmt = stmt.where(getattr(self.model, key) == value)
            stmt = stmt.order_by(self.model.id)
            result = await self.session.exec(stmt)
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving {self.model.__name__}: {e}")
            raise DatabaseError("Internal Server Error") from e

    async def create(self, entity: T) -> T:
        """
        Create and commit a new entity.

        The commit happens here rather than at the end of the request so
        that the entity is durable before anything is broadcast about it.

        Returns:
            The created entity with generated fields populated.

        Raises:
            DatabaseError: If the write fails.
        """
        try:
            self.session.add(entity)
            await self.session.commit()
            await self.session.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.model.__name__}: {e}")
            raise DatabaseError("Internal Server Error") from e
