"""CRUD operations for services."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from toggler.crud._base import CRUDBase
from toggler.models.service import Service
from toggler.schemas.service import ServiceCreate, ServiceUpdate


class CRUDService(CRUDBase[Service, ServiceCreate, ServiceUpdate]):
    """CRUD operations for services."""

    async def get_by_key(self, db: AsyncSession, key: str) -> Optional[Service]:
        """Get a service by its unique key.

        Args:
            db: Database session
            key: Service key

        Returns:
            Service if found, None otherwise
        """
        result = await db.execute(select(Service).where(Service.key == key))
        return result.scalar_one_or_none()


service = CRUDService(Service)
