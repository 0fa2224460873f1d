"""CRUD operations for toggles."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toggler.crud._base import CRUDBase
from toggler.models.toggle import Toggle
from toggler.schemas.toggle import ToggleCreate, ToggleUpdate


class CRUDToggle(CRUDBase[Toggle, ToggleCreate, ToggleUpdate]):
    """CRUD operations for toggles."""

    async def get_by_key(self, db: AsyncSession, key: str) -> Optional[Toggle]:
        """Get a toggle by its unique key.

        Args:
            db: Database session
            key: Toggle key

        Returns:
            Toggle if found, None otherwise
        """
        result = await db.execute(select(Toggle).where(Toggle.key == key))
        return result.scalar_one_or_none()


toggle = CRUDToggle(Toggle)
