"""Toggle state model."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from toggler.models._base import Base

if TYPE_CHECKING:
    from toggler.models.service import Service
    from toggler.models.toggle import Toggle


class ToggleState(Base):
    """Current value of one toggle for one service.

    N-to-1 to both Toggle and Service. At most one row exists per
    (toggle_id, service_id); the unique constraint backs the check done in
    the registry service so concurrent creators cannot both insert.
    ``value`` is nullable: true, false or unset.
    """

    __tablename__ = "toggle_state"

    toggle_id: Mapped[int] = mapped_column(ForeignKey("toggle.id"), nullable=False, index=True)
    service_id: Mapped[int] = mapped_column(ForeignKey("service.id"), nullable=False, index=True)
    value: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    # Relationships
    toggle: Mapped["Toggle"] = relationship("Toggle", back_populates="states", lazy="noload")
    service: Mapped["Service"] = relationship("Service", back_populates="states", lazy="noload")

    __table_args__ = (
        UniqueConstraint("toggle_id", "service_id", name="uq_toggle_state_pair"),
    )
