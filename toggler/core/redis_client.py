"""Redis client used as the toggle state notification bus."""

from typing import Optional

from redis.asyncio import Redis

from toggler.core.config import settings
from toggler.core.logging import logger


class RedisClient:
    """Lazily connected async Redis client.

    The connection is created on first access so importing this module never
    touches the network.
    """

    def __init__(self) -> None:
        """Initialize without connecting."""
        self._client: Optional[Redis] = None

    @property
    def client(self) -> Redis:
        """Return the shared Redis connection, creating it if needed."""
        if self._client is None:
            self._client = Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                password=settings.REDIS_PASSWORD,
                decode_responses=True,
            )
            logger.debug(f"Redis client created for {settings.REDIS_HOST}:{settings.REDIS_PORT}")
        return self._client

    async def close(self) -> None:
        """Close the connection if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


redis_client = RedisClient()
