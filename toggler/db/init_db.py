"""Schema creation for local development and tests.

Production schemas are managed by the alembic migrations.
"""

from toggler.core.logging import logger
from toggler.db.session import engine
from toggler.models import Base


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized")


async def drop_db() -> None:
    """Drop all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
