"""Toggle state registry service.

Owns the mutation protocol for toggle states: uniqueness per
(toggle, service) pair, idempotent create-or-get, full replacement with
change notification, and deletion.

Notifications are sent strictly after the store commit. Creation and
deletion do not notify; only replacement does.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from toggler import crud, schemas
from toggler.core.exceptions import (
    ConflictOnCreateException,
    DuplicateKeyException,
    InvalidArgumentException,
    NotFoundException,
)
from toggler.core.identity_service import IdentityService, identity_service
from toggler.core.logging import ContextualLogger
from toggler.core.logging import logger as default_logger
from toggler.core.toggle_state_publisher import ToggleStatePublisher, toggle_state_publisher
from toggler.db.unit_of_work import UnitOfWork
from toggler.models.toggle_state import ToggleState


class ToggleStateService:
    """Service for reading and mutating toggle states."""

    def __init__(
        self,
        publisher: Optional[ToggleStatePublisher] = None,
        identities: Optional[IdentityService] = None,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        """Initialize the toggle state service.

        Args:
            publisher: Change publisher (defaults to the Redis-backed singleton).
            identities: Identity registry (defaults to the singleton).
            logger: Optional contextual logger.
        """
        self.publisher = publisher or toggle_state_publisher
        self.identities = identities or identity_service
        self.logger = logger or default_logger.with_context(component="toggle_state_service")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_states(self, db: AsyncSession) -> List[ToggleState]:
        """Return every toggle state in store order."""
        return await crud.toggle_state.get_multi(db)

    async def get_state(self, db: AsyncSession, id: int) -> ToggleState:
        """Get a toggle state by id.

        Raises:
            NotFoundException: If no state has this id.
        """
        toggle_state = await crud.toggle_state.get(db, id=id)
        if toggle_state is None:
            raise NotFoundException(f"Toggle state {id} not found")
        return toggle_state

    async def get_state_by_keys(
        self, db: AsyncSession, toggle_key: Optional[str], service_key: Optional[str]
    ) -> ToggleState:
        """Get the state binding a toggle key to a service key.

        The toggle and service are resolved on the returned record.

        Raises:
            InvalidArgumentException: If either key is missing or empty.
            NotFoundException: If the toggle, the service or the binding does not exist.
        """
        if not toggle_key or not service_key:
            raise InvalidArgumentException("Both toggle key and service key are required")

        if await self.identities.find_toggle_by_key(db, toggle_key) is None:
            raise NotFoundException(f"Toggle '{toggle_key}' not found")
        if await self.identities.find_service_by_key(db, service_key) is None:
            raise NotFoundException(f"Service '{service_key}' not found")

        toggle_state = await crud.toggle_state.get_by_keys(
            db, toggle_key=toggle_key, service_key=service_key
        )
        if toggle_state is None:
            raise NotFoundException(
                f"No toggle state for toggle '{toggle_key}' and service '{service_key}'"
            )
        return toggle_state

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _check_references(self, db: AsyncSession, toggle_id: int, service_id: int) -> None:
        await self.identities.get_toggle(db, toggle_id)
        await self.identities.get_service(db, service_id)

    async def _insert(
        self, db: AsyncSession, state_in: schemas.ToggleStateCreate
    ) -> ToggleState:
        try:
            return await crud.toggle_state.create(db, obj_in=state_in)
        except IntegrityError as e:
            await db.rollback()
            raise ConflictOnCreateException(state_in.toggle_id, state_in.service_id) from e

    async def create_or_get_state(
        self, db: AsyncSession, state_in: schemas.ToggleStateCreate
    ) -> ToggleState:
        """Return the state for the pair, creating it only if absent.

        When a state already exists the candidate's value is discarded and
        the stored record is returned unchanged. No notification is sent in
        either case.

        A concurrent creator may insert the same pair between our check and
        our insert; the unique constraint rejects the second insert and the
        winner's record is returned instead.

        Raises:
            NotFoundException: If the toggle or the service does not exist.
        """
        existing = await crud.toggle_state.get_by_pair(
            db, toggle_id=state_in.toggle_id, service_id=state_in.service_id
        )
        if existing is not None:
            return existing

        await self._check_references(db, state_in.toggle_id, state_in.service_id)

        try:
            created = await self._insert(db, state_in)
        except ConflictOnCreateException as conflict:
            winner = await crud.toggle_state.get_by_pair(
                db, toggle_id=conflict.toggle_id, service_id=conflict.service_id
            )
            if winner is None:
                raise
            self.logger.info(
                f"Toggle state for toggle {conflict.toggle_id} and service"
                f" {conflict.service_id} created concurrently, returning id={winner.id}"
            )
            return winner

        self.logger.info(
            f"Created toggle state {created.id} (toggle={created.toggle_id},"
            f" service={created.service_id}, value={created.value})"
        )
        return created

    async def replace_state(
        self, db: AsyncSession, id: int, state_in: schemas.ToggleStateUpdate
    ) -> ToggleState:
        """Replace a toggle state and publish the change.

        Every field is overwritten, including toggle_id and service_id, so
        a replacement may rebind the state to another pair. After the
        commit the record is re-read with its toggle and service resolved
        and that stored version is published, not the caller's input.

        Raises:
            InvalidArgumentException: If ``state_in.id`` differs from ``id``.
            NotFoundException: If the state, toggle or service does not exist.
            DuplicateKeyException: If the target pair is bound by another state.
        """
        if state_in.id != id:
            raise InvalidArgumentException(
                f"Toggle state id mismatch: path id {id}, body id {state_in.id}"
            )

        db_obj = await self.get_state(db, id)
        await self._check_references(db, state_in.toggle_id, state_in.service_id)

        rebinding = (db_obj.toggle_id, db_obj.service_id) != (
            state_in.toggle_id,
            state_in.service_id,
        )
        if rebinding:
            holder = await crud.toggle_state.get_by_pair(
                db, toggle_id=state_in.toggle_id, service_id=state_in.service_id
            )
            if holder is not None and holder.id != id:
                raise DuplicateKeyException(
                    f"Toggle {state_in.toggle_id} is already bound to service"
                    f" {state_in.service_id} by toggle state {holder.id}"
                )
            self.logger.warning(
                f"Toggle state {id} rebound from ({db_obj.toggle_id}, {db_obj.service_id})"
                f" to ({state_in.toggle_id}, {state_in.service_id})"
            )

        try:
            async with UnitOfWork(db) as uow:
                await crud.toggle_state.replace(db, db_obj=db_obj, obj_in=state_in, uow=uow)
        except IntegrityError as e:
            raise DuplicateKeyException(
                f"Toggle {state_in.toggle_id} is already bound to service {state_in.service_id}"
            ) from e

        resolved = await crud.toggle_state.get_resolved(db, id)
        self.logger.info(f"Replaced toggle state {id} (value={state_in.value})")

        await self.publisher.publish_toggle_state(resolved)
        return resolved

    async def update_state(
        self, db: AsyncSession, id: int, state_in: schemas.ToggleStateUpdate
    ) -> ToggleState:
        """Full update (PUT). Same contract as ``replace_state``."""
        return await self.replace_state(db, id, state_in)

    async def patch_state(
        self, db: AsyncSession, id: int, state_in: schemas.ToggleStateUpdate
    ) -> ToggleState:
        """Patch (PATCH). Performs the same whole-record replacement as ``update_state``."""
        return await self.replace_state(db, id, state_in)

    async def delete_state(self, db: AsyncSession, id: int) -> None:
        """Delete a toggle state. Subscribers are not notified.

        Raises:
            NotFoundException: If no state has this id.
        """
        removed = await crud.toggle_state.remove(db, id=id)
        if removed is None:
            raise NotFoundException(f"Toggle state {id} not found")
        self.logger.info(f"Deleted toggle state {id}")

    async def announce_service_start(self, db: AsyncSession, service_key: str) -> int:
        """Publish every state of a service as a start message.

        Lets a freshly started service hydrate its toggles from the bus.

        Returns:
            Number of messages published.

        Raises:
            InvalidArgumentException: If the service key is empty.
            NotFoundException: If the service does not exist.
        """
        if not service_key:
            raise InvalidArgumentException("Service key is required")
        service = await self.identities.find_service_by_key(db, service_key)
        if service is None:
            raise NotFoundException(f"Service '{service_key}' not found")

        published = 0
        for toggle_state in await crud.toggle_state.get_multi_by_service(
            db, service_id=service.id
        ):
            if await self.publisher.publish_toggle_state(toggle_state, is_start_message=True):
                published += 1

        self.logger.info(f"Announced start of service '{service_key}' ({published} states)")
        return published


# Singleton instance
toggle_state_service = ToggleStateService()
