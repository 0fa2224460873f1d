"""Unit of work for transactional scoping of store writes."""

from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession


class UnitOfWork:
    """Commit on clean exit, roll back on error.

    CRUD methods accept an optional ``uow``; when given they only flush and
    leave the commit to the unit of work:

        async with UnitOfWork(db) as uow:
            await crud.toggle_state.create(db, obj_in=state_in, uow=uow)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the unit of work.

        Args:
            session: The session the unit of work controls.
        """
        self.session = session
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        """Enter the unit of work."""
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        """Commit if no exception occurred, otherwise roll back."""
        if exc_type is not None:
            await self.rollback()
            return
        if not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Commit the session."""
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Roll back the session."""
        await self.session.rollback()

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        await self.session.flush()
