"""Service schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServiceBase(BaseModel):
    """Base schema for services."""

    key: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Unique, immutable service key; also its notification topic",
    )
    description: Optional[str] = Field(None, description="Human-readable description")


class ServiceCreate(ServiceBase):
    """Schema for creating a service."""

    pass


class ServiceUpdate(BaseModel):
    """Schema for updating a service. The key cannot be changed."""

    description: Optional[str] = Field(None, description="Updated description")


class Service(ServiceBase):
    """Complete service schema."""

    id: int
    created_at: datetime
    modified_at: datetime

    class Config:
        """Pydantic config."""

        from_attributes = True


class ServiceStartResponse(BaseModel):
    """Result of announcing a service start."""

    service_key: str = Field(..., description="Key of the service that started")
    published: int = Field(..., description="Number of toggle state messages published")
