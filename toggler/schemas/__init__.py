"""Schemas for the toggler API."""

from toggler.schemas.service import Service, ServiceCreate, ServiceStartResponse, ServiceUpdate
from toggler.schemas.toggle import Toggle, ToggleCreate, ToggleUpdate
from toggler.schemas.toggle_state import (
    ToggleState,
    ToggleStateCreate,
    ToggleStateMessage,
    ToggleStateUpdate,
)

__all__ = [
    "Service",
    "ServiceCreate",
    "ServiceStartResponse",
    "ServiceUpdate",
    "Toggle",
    "ToggleCreate",
    "ToggleUpdate",
    "ToggleState",
    "ToggleStateCreate",
    "ToggleStateMessage",
    "ToggleStateUpdate",
]
