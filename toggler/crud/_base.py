"""Base CRUD class shared by all toggler tables."""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toggler.db.unit_of_work import UnitOfWork
from toggler.models._base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """CRUD operations over a single model.

    Every write takes an optional unit of work. With a ``uow`` the change is
    only flushed; without one it is committed immediately.
    """

    def __init__(self, model: Type[ModelType]):
        """Initialize the CRUD object.

        Args:
            model: The SQLAlchemy model class.
        """
        self.model = model

    async def _persist(self, db: AsyncSession, uow: Optional[UnitOfWork]) -> None:
        if uow:
            await uow.flush()
        else:
            await db.commit()

    async def get(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        """Get a record by ID.

        Args:
            db: Database session
            id: Record ID

        Returns:
            The record if found, None otherwise
        """
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: Optional[int] = None
    ) -> List[ModelType]:
        """Get records in store order.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return (all when None)

        Returns:
            List of records
        """
        stmt = select(self.model).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: Union[CreateSchemaType, Dict[str, Any]],
        uow: Optional[UnitOfWork] = None,
    ) -> ModelType:
        """Create a new record.

        Args:
            db: Database session
            obj_in: Creation data
            uow: Optional unit of work for transaction control

        Returns:
            The created record

        Raises:
            sqlalchemy.exc.IntegrityError: If a store constraint is violated
        """
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data)
        db.add(db_obj)
        await self._persist(db, uow)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        uow: Optional[UnitOfWork] = None,
    ) -> ModelType:
        """Update a record with the given fields.

        Args:
            db: Database session
            db_obj: Record to update
            obj_in: Fields to set; pydantic input only sets fields that were provided
            uow: Optional unit of work for transaction control

        Returns:
            The updated record
        """
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await self._persist(db, uow)
        return db_obj

    async def remove(
        self, db: AsyncSession, *, id: int, uow: Optional[UnitOfWork] = None
    ) -> Optional[ModelType]:
        """Remove a record.

        Args:
            db: Database session
            id: Record ID
            uow: Optional unit of work for transaction control

        Returns:
            The removed record, or None if it did not exist
        """
        db_obj = await self.get(db, id=id)
        if db_obj is None:
            return None
        await db.delete(db_obj)
        await self._persist(db, uow)
        return db_obj
