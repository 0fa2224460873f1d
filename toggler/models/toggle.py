"""Toggle model."""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toggler.models._base import Base

if TYPE_CHECKING:
    from toggler.models.toggle_state import ToggleState


class Toggle(Base):
    """A named feature flag.

    The key is unique and immutable after creation. Toggle states reference
    a toggle by id but never own it.
    """

    __tablename__ = "toggle"

    key: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    states: Mapped[List["ToggleState"]] = relationship(
        "ToggleState", back_populates="toggle", lazy="noload"
    )
