"""Service model."""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toggler.models._base import Base

if TYPE_CHECKING:
    from toggler.models.toggle_state import ToggleState


class Service(Base):
    """A consumer of toggle states.

    The key doubles as the notification topic for every state bound to it.
    """

    __tablename__ = "service"

    key: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    states: Mapped[List["ToggleState"]] = relationship(
        "ToggleState", back_populates="service", lazy="noload"
    )
