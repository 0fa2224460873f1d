"""Toggle state publisher for change notifications.

Publishes a ``ToggleStateMessage`` on the topic named by the service key
whenever a toggle state changes. The publisher is decoupled from storage:
it only sees fully resolved states handed over by the registry service.

Delivery is at-least-once from the publish call into the bus; the publisher
neither retries nor buffers. A failed publish is logged and swallowed so it
never undoes a committed store write.
"""

from typing import Optional

from toggler.core.config import settings
from toggler.core.logging import ContextualLogger
from toggler.core.logging import logger as default_logger
from toggler.core.pubsub import MessageBus, core_pubsub
from toggler.models.toggle_state import ToggleState
from toggler.schemas.toggle_state import ToggleStateMessage


class ToggleStatePublisher:
    """Publishes toggle state changes to the message bus."""

    def __init__(
        self,
        bus: Optional[MessageBus] = None,
        logger: Optional[ContextualLogger] = None,
        enabled: Optional[bool] = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            bus: Message bus to publish on (defaults to Redis pubsub).
            logger: Optional contextual logger.
            enabled: Override for settings.NOTIFICATIONS_ENABLED.
        """
        self.bus = bus or core_pubsub
        self.logger = logger or default_logger.with_context(component="toggle_state_publisher")
        self.enabled = settings.NOTIFICATIONS_ENABLED if enabled is None else enabled

    @staticmethod
    def build_message(
        toggle_state: Optional[ToggleState], is_start_message: Optional[bool] = None
    ) -> Optional[ToggleStateMessage]:
        """Build the change event for a resolved toggle state.

        Returns None when the state, its toggle or its service is missing:
        the record is not hydrated enough to address anyone.
        """
        if toggle_state is None or toggle_state.toggle is None or toggle_state.service is None:
            return None
        return ToggleStateMessage(
            toggle_key=toggle_state.toggle.key,
            service_key=toggle_state.service.key,
            value=toggle_state.value,
            is_start_message=is_start_message,
        )

    async def notify(self, message: ToggleStateMessage) -> bool:
        """Publish a change event on the service key's topic.

        Args:
            message: The event to publish.

        Returns:
            True if the bus accepted the message, False if it was skipped or failed.
        """
        if not self.enabled:
            self.logger.debug(
                f"Notifications disabled, not publishing {message.toggle_key}"
                f" for {message.service_key}"
            )
            return False

        try:
            await self.bus.publish(message.service_key, message)
        except Exception as e:
            self.logger.error(
                f"Failed to publish toggle state {message.toggle_key}"
                f" for {message.service_key}: {e}"
            )
            return False

        self.logger.info(
            f"Published toggle state {message.toggle_key}={message.value}"
            f" to {message.service_key}"
        )
        return True

    async def publish_toggle_state(
        self, toggle_state: Optional[ToggleState], is_start_message: Optional[bool] = None
    ) -> bool:
        """Publish the state if it is fully resolved, otherwise skip silently.

        Args:
            toggle_state: Toggle state with toggle and service loaded.
            is_start_message: Mark the event as part of a service start announcement.

        Returns:
            True if a message was published.
        """
        message = self.build_message(toggle_state, is_start_message=is_start_message)
        if message is None:
            self.logger.debug("Toggle state not resolved, skipping notification")
            return False
        return await self.notify(message)


toggle_state_publisher = ToggleStatePublisher()
