"""Identity registry for toggles and services.

Toggles and services are looked up by key everywhere else in the system;
this service owns their creation and guarantees key uniqueness.
"""

from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from toggler import crud, schemas
from toggler.core.exceptions import (
    DuplicateKeyException,
    InvalidArgumentException,
    NotFoundException,
)
from toggler.core.logging import ContextualLogger
from toggler.core.logging import logger as default_logger
from toggler.crud.crud_service import CRUDService
from toggler.crud.crud_toggle import CRUDToggle
from toggler.models.service import Service
from toggler.models.toggle import Toggle

Record = Union[Toggle, Service]
RecordCrud = Union[CRUDToggle, CRUDService]


class IdentityService:
    """Create, read and delete toggles and services."""

    def __init__(self, logger: Optional[ContextualLogger] = None) -> None:
        """Initialize the identity service.

        Args:
            logger: Optional contextual logger for structured logging.
        """
        self.logger = logger or default_logger.with_context(component="identity_service")

    # ------------------------------------------------------------------
    # Shared implementation
    # ------------------------------------------------------------------

    async def _create(
        self,
        db: AsyncSession,
        crud_obj: RecordCrud,
        obj_in: Union[schemas.ToggleCreate, schemas.ServiceCreate],
        kind: str,
    ) -> Record:
        key = (obj_in.key or "").strip()
        if not key:
            raise InvalidArgumentException(f"{kind} key is required")

        if await crud_obj.get_by_key(db, key) is not None:
            raise DuplicateKeyException(f"{kind} with key '{key}' already exists")

        data = obj_in.model_dump()
        data["key"] = key
        try:
            db_obj = await crud_obj.create(db, obj_in=data)
        except IntegrityError as e:
            # Lost a race against another creator with the same key
            await db.rollback()
            raise DuplicateKeyException(f"{kind} with key '{key}' already exists") from e

        self.logger.info(f"Created {kind.lower()} '{key}' (id={db_obj.id})")
        return db_obj

    async def _get(self, db: AsyncSession, crud_obj: RecordCrud, id: int, kind: str) -> Record:
        db_obj = await crud_obj.get(db, id=id)
        if db_obj is None:
            raise NotFoundException(f"{kind} {id} not found")
        return db_obj

    async def _update(
        self,
        db: AsyncSession,
        crud_obj: RecordCrud,
        id: int,
        obj_in: Union[schemas.ToggleUpdate, schemas.ServiceUpdate],
        kind: str,
    ) -> Record:
        db_obj = await self._get(db, crud_obj, id, kind)
        return await crud_obj.update(db, db_obj=db_obj, obj_in=obj_in)

    async def _delete(self, db: AsyncSession, crud_obj: RecordCrud, id: int, kind: str) -> None:
        await self._get(db, crud_obj, id, kind)

        filter_name = "toggle_id" if kind == "Toggle" else "service_id"
        references = await crud.toggle_state.count_references(db, **{filter_name: id})
        if references:
            raise InvalidArgumentException(
                f"{kind} {id} is still referenced by {references} toggle state(s)"
            )

        await crud_obj.remove(db, id=id)
        self.logger.info(f"Deleted {kind.lower()} {id}")

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------

    async def create_toggle(self, db: AsyncSession, toggle_in: schemas.ToggleCreate) -> Toggle:
        """Create a toggle.

        Raises:
            InvalidArgumentException: If the key is empty.
            DuplicateKeyException: If a toggle with the key already exists.
        """
        return await self._create(db, crud.toggle, toggle_in, "Toggle")

    async def get_toggle(self, db: AsyncSession, id: int) -> Toggle:
        """Get a toggle by id, raising NotFoundException if absent."""
        return await self._get(db, crud.toggle, id, "Toggle")

    async def find_toggle_by_key(self, db: AsyncSession, key: str) -> Optional[Toggle]:
        """Find a toggle by key; None if there is no such toggle."""
        if not key:
            return None
        return await crud.toggle.get_by_key(db, key)

    async def list_toggles(self, db: AsyncSession) -> List[Toggle]:
        """List all toggles."""
        return await crud.toggle.get_multi(db)

    async def update_toggle(
        self, db: AsyncSession, id: int, toggle_in: schemas.ToggleUpdate
    ) -> Toggle:
        """Update a toggle's display metadata."""
        return await self._update(db, crud.toggle, id, toggle_in, "Toggle")

    async def delete_toggle(self, db: AsyncSession, id: int) -> None:
        """Delete a toggle that no toggle state references."""
        await self._delete(db, crud.toggle, id, "Toggle")

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    async def create_service(
        self, db: AsyncSession, service_in: schemas.ServiceCreate
    ) -> Service:
        """Create a service.

        Raises:
            InvalidArgumentException: If the key is empty.
            DuplicateKeyException: If a service with the key already exists.
        """
        return await self._create(db, crud.service, service_in, "Service")

    async def get_service(self, db: AsyncSession, id: int) -> Service:
        """Get a service by id, raising NotFoundException if absent."""
        return await self._get(db, crud.service, id, "Service")

    async def find_service_by_key(self, db: AsyncSession, key: str) -> Optional[Service]:
        """Find a service by key; None if there is no such service."""
        if not key:
            return None
        return await crud.service.get_by_key(db, key)

    async def list_services(self, db: AsyncSession) -> List[Service]:
        """List all services."""
        return await crud.service.get_multi(db)

    async def update_service(
        self, db: AsyncSession, id: int, service_in: schemas.ServiceUpdate
    ) -> Service:
        """Update a service's display metadata."""
        return await self._update(db, crud.service, id, service_in, "Service")

    async def delete_service(self, db: AsyncSession, id: int) -> None:
        """Delete a service that no toggle state references."""
        await self._delete(db, crud.service, id, "Service")


# Singleton instance
identity_service = IdentityService()
