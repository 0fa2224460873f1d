"""Publish/subscribe over Redis channels.

A topic maps one-to-one onto a Redis channel. Toggle state changes are
published on the channel named by the service key, so a service subscribes
to its own key to receive every change addressed to it.
"""

import json
from typing import Any, Protocol

from redis.exceptions import RedisError

from toggler.core.exceptions import PublishException
from toggler.core.redis_client import redis_client


class MessageBus(Protocol):
    """Minimal bus contract the change notifier depends on."""

    async def publish(self, topic: str, message: Any) -> int:
        """Publish a message to a topic and return the number of receivers."""
        ...


class CorePubSub:
    """Redis-backed message bus."""

    @staticmethod
    def _serialize(message: Any) -> str:
        if isinstance(message, str):
            return message
        if hasattr(message, "model_dump_json"):
            return message.model_dump_json(by_alias=True)
        return json.dumps(message)

    async def publish(self, topic: str, message: Any) -> int:
        """Publish a message on the channel named by ``topic``.

        Args:
            topic: Channel name (the service key for toggle state changes).
            message: A string, dict or pydantic model.

        Returns:
            Number of subscribers that received the message.

        Raises:
            PublishException: If Redis rejects the publish.
        """
        if not topic:
            raise PublishException(topic, "topic must not be empty")
        try:
            return await redis_client.client.publish(topic, self._serialize(message))
        except RedisError as e:
            raise PublishException(topic, str(e)) from e


core_pubsub = CorePubSub()
