"""Models for the toggler database."""

from toggler.models._base import Base
from toggler.models.service import Service
from toggler.models.toggle import Toggle
from toggler.models.toggle_state import ToggleState

__all__ = ["Base", "Service", "Toggle", "ToggleState"]
