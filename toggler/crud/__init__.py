"""CRUD layer for the toggler database."""

from toggler.crud.crud_service import service
from toggler.crud.crud_toggle import toggle
from toggler.crud.crud_toggle_state import toggle_state

__all__ = ["service", "toggle", "toggle_state"]
