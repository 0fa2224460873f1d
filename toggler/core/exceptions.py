"""Exceptions for the Toggler backend.

All domain exceptions inherit from TogglerException. The API layer maps
them to HTTP responses in ``toggler.main``.
"""

from typing import Optional


class TogglerException(Exception):
    """Base exception for toggler operations."""

    status_code: int = 500

    def __init__(self, detail: Optional[str] = None) -> None:
        """Initialize the exception.

        Args:
            detail: Human-readable error message.
        """
        self.detail = detail or self.__class__.__doc__ or "Toggler error"
        super().__init__(self.detail)


class NotFoundException(TogglerException):
    """Raised when a referenced record does not exist."""

    status_code = 404


class InvalidArgumentException(TogglerException):
    """Raised when required identifiers are missing or inconsistent."""

    status_code = 400


class DuplicateKeyException(TogglerException):
    """Raised when a unique key is already taken."""

    status_code = 409


class ConflictOnCreateException(TogglerException):
    """Raised when a concurrent insert won the race for a toggle state pair.

    Never surfaced to API callers: the registry service recovers by re-reading.
    """

    status_code = 409

    def __init__(self, toggle_id: int, service_id: int) -> None:
        """Initialize the conflict.

        Args:
            toggle_id: Toggle id of the contested pair.
            service_id: Service id of the contested pair.
        """
        self.toggle_id = toggle_id
        self.service_id = service_id
        super().__init__(
            f"Toggle state for toggle {toggle_id} and service {service_id} was created concurrently"
        )


class PublishException(TogglerException):
    """Raised by the bus client when a message could not be published."""

    def __init__(self, topic: str, reason: str) -> None:
        """Initialize the publish failure.

        Args:
            topic: Topic the message was addressed to.
            reason: Underlying error description.
        """
        self.topic = topic
        self.reason = reason
        super().__init__(f"Failed to publish to '{topic}': {reason}")
