"""CRUD operations for toggle states.

Reads come in two flavours: plain (references left unloaded) and resolved,
where the referenced Toggle and Service are loaded alongside the state.
"""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from toggler.crud._base import CRUDBase
from toggler.db.unit_of_work import UnitOfWork
from toggler.models.service import Service
from toggler.models.toggle import Toggle
from toggler.models.toggle_state import ToggleState
from toggler.schemas.toggle_state import ToggleStateCreate, ToggleStateUpdate


class CRUDToggleState(CRUDBase[ToggleState, ToggleStateCreate, ToggleStateUpdate]):
    """CRUD operations for toggle states.

    The store guards the (toggle_id, service_id) pair with a unique
    constraint; callers that insert must be ready for an IntegrityError.
    """

    def _resolved(self):
        # populate_existing refreshes references on rows already in the session,
        # e.g. after a replace rebound the state to another toggle or service
        return (
            select(self.model)
            .options(selectinload(self.model.toggle), selectinload(self.model.service))
            .execution_options(populate_existing=True)
        )

    async def get_resolved(self, db: AsyncSession, id: int) -> Optional[ToggleState]:
        """Get a toggle state by ID with its toggle and service loaded.

        Args:
            db: Database session
            id: Toggle state ID

        Returns:
            ToggleState if found, None otherwise
        """
        result = await db.execute(self._resolved().where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_pair(
        self, db: AsyncSession, *, toggle_id: int, service_id: int
    ) -> Optional[ToggleState]:
        """Get the toggle state binding a toggle to a service.

        Args:
            db: Database session
            toggle_id: Toggle ID
            service_id: Service ID

        Returns:
            ToggleState if the pair is bound, None otherwise
        """
        result = await db.execute(
            select(self.model).where(
                self.model.toggle_id == toggle_id,
                self.model.service_id == service_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_keys(
        self, db: AsyncSession, *, toggle_key: str, service_key: str
    ) -> Optional[ToggleState]:
        """Get a toggle state by toggle key and service key, resolved.

        Args:
            db: Database session
            toggle_key: Toggle key
            service_key: Service key

        Returns:
            ToggleState with toggle and service loaded, None if not bound
        """
        result = await db.execute(
            self._resolved()
            .join(Toggle, self.model.toggle_id == Toggle.id)
            .join(Service, self.model.service_id == Service.id)
            .where(Toggle.key == toggle_key, Service.key == service_key)
        )
        return result.scalars().first()

    async def get_multi_by_service(
        self, db: AsyncSession, *, service_id: int
    ) -> List[ToggleState]:
        """Get all toggle states of a service, resolved.

        Args:
            db: Database session
            service_id: Service ID

        Returns:
            List of toggle states
        """
        result = await db.execute(
            self._resolved()
            .where(self.model.service_id == service_id)
            .order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def count_references(
        self,
        db: AsyncSession,
        *,
        toggle_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> int:
        """Count toggle states referencing a toggle and/or a service.

        Args:
            db: Database session
            toggle_id: Optional toggle ID filter
            service_id: Optional service ID filter

        Returns:
            Number of matching toggle states
        """
        stmt = select(func.count()).select_from(self.model)
        if toggle_id is not None:
            stmt = stmt.where(self.model.toggle_id == toggle_id)
        if service_id is not None:
            stmt = stmt.where(self.model.service_id == service_id)
        result = await db.execute(stmt)
        return int(result.scalar_one())

    async def replace(
        self,
        db: AsyncSession,
        *,
        db_obj: ToggleState,
        obj_in: ToggleStateUpdate,
        uow: Optional[UnitOfWork] = None,
    ) -> ToggleState:
        """Replace every mutable field of a toggle state.

        Unlike ``update``, fields missing from the input are not left alone:
        toggle_id, service_id and value are all overwritten.

        Args:
            db: Database session
            db_obj: Stored toggle state
            obj_in: Replacement body
            uow: Optional unit of work for transaction control

        Returns:
            The replaced toggle state
        """
        return await self.update(
            db,
            db_obj=db_obj,
            obj_in={
                "toggle_id": obj_in.toggle_id,
                "service_id": obj_in.service_id,
                "value": obj_in.value,
            },
            uow=uow,
        )


toggle_state = CRUDToggleState(ToggleState)
