"""Logging for the Toggler backend.

Provides a ``ContextualLogger`` that carries structured dimensions
(e.g. ``component``, ``toggle_state_id``) and renders them on every line.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional, Tuple

from toggler.core.config import settings

LOGGER_NAME = "toggler"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter with persistent context dimensions.

    Use ``with_context`` to derive a child logger with additional dimensions:

        log = logger.with_context(component="toggle_state_service")
        log.info("Replaced toggle state")  # ... Replaced toggle state [component=toggle_state_service]
    """

    def __init__(self, logger: logging.Logger, dimensions: Optional[dict] = None) -> None:
        """Initialize the adapter.

        Args:
            logger: The underlying standard library logger.
            dimensions: Context dimensions attached to every record.
        """
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions = dict(dimensions or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Append the context dimensions to the message."""
        if not self.dimensions:
            return msg, kwargs
        rendered = " ".join(f"{k}={v}" for k, v in self.dimensions.items())
        return f"{msg} [{rendered}]", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with the given dimensions merged into the current ones."""
        merged = {**self.dimensions, **dimensions}
        return ContextualLogger(self.logger, merged)


def _configure() -> logging.Logger:
    base = logging.getLogger(LOGGER_NAME)
    if base.handlers:
        return base

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    base.addHandler(handler)
    base.setLevel(settings.LOG_LEVEL)
    base.propagate = False
    return base


logger = ContextualLogger(_configure())
