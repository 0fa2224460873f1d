"""Dependencies that are used in the API endpoints."""

import uuid

from fastapi import Header

from toggler.core.logging import ContextualLogger, logger
from toggler.db.session import get_db

__all__ = ["get_db", "get_logger"]


async def get_logger(
    x_request_id: str | None = Header(default=None, alias="X-Request-ID"),
) -> ContextualLogger:
    """Request-scoped logger tagged with the caller's request id (or a fresh one)."""
    return logger.with_context(request_id=x_request_id or str(uuid.uuid4()))
