"""Toggle schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ToggleBase(BaseModel):
    """Base schema for toggles."""

    key: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Unique, immutable toggle key (e.g. 'dark-mode')",
    )
    description: Optional[str] = Field(None, description="Human-readable description")


class ToggleCreate(ToggleBase):
    """Schema for creating a toggle."""

    pass


class ToggleUpdate(BaseModel):
    """Schema for updating a toggle. The key cannot be changed."""

    description: Optional[str] = Field(None, description="Updated description")


class Toggle(ToggleBase):
    """Complete toggle schema."""

    id: int
    created_at: datetime
    modified_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True
