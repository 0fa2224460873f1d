"""Toggle state schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from toggler.schemas.service import Service
from toggler.schemas.toggle import Toggle


class ToggleStateBase(BaseModel):
    """Base schema for toggle states.

    Binds one toggle to one service. ``value`` is tri-state: true, false or
    unset (null).
    """

    toggle_id: int = Field(..., description="ID of the toggle")
    service_id: int = Field(..., description="ID of the service")
    value: Optional[bool] = Field(None, description="Toggle value for the service (null = unset)")


class ToggleStateCreate(ToggleStateBase):
    """Schema for create-or-get.

    If a state already exists for the pair, it is returned unchanged and
    ``value`` is ignored.
    """

    pass


class ToggleStateUpdate(ToggleStateBase):
    """Full replacement body. ``id`` must match the path id."""

    id: int = Field(..., description="ID of the toggle state being replaced")


class ToggleState(ToggleStateBase):
    """Complete toggle state schema.

    ``toggle`` and ``service`` are populated when the record was read with
    its references resolved.
    """

    id: int
    created_at: datetime
    modified_at: datetime
    toggle: Optional[Toggle] = None
    service: Optional[Service] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class ToggleStateMessage(BaseModel):
    """Change event published on the service's topic.

    Serialized with camelCase keys:
    ``{"toggleKey": ..., "serviceKey": ..., "value": ..., "isStartMessage": ...}``.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    toggle_key: str
    service_key: str
    value: Optional[bool] = None
    is_start_message: Optional[bool] = None
