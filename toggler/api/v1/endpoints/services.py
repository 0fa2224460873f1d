"""API endpoints for services."""

from typing import List

from fastapi import Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from toggler import schemas
from toggler.api import deps
from toggler.api.router import TrailingSlashRouter
from toggler.core.exceptions import NotFoundException
from toggler.core.identity_service import identity_service
from toggler.core.toggle_state_service import toggle_state_service

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.Service])
async def list_services(
    db: AsyncSession = Depends(deps.get_db),
) -> List[schemas.Service]:
    """List all services."""
    return await identity_service.list_services(db)


@router.post("/", response_model=schemas.Service, status_code=201)
async def create_service(
    service_in: schemas.ServiceCreate,
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Service:
    """Create a service. Keys are unique and cannot be changed later."""
    return await identity_service.create_service(db, service_in)


@router.get("/key/{key}", response_model=schemas.Service)
async def get_service_by_key(
    key: str = Path(..., description="Key of the service"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Service:
    """Get a service by its key."""
    service = await identity_service.find_service_by_key(db, key)
    if service is None:
        raise NotFoundException(f"Service '{key}' not found")
    return service


@router.get("/{id}", response_model=schemas.Service)
async def get_service(
    id: int = Path(..., description="ID of the service"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Service:
    """Get a service by ID."""
    return await identity_service.get_service(db, id)


@router.patch("/{id}", response_model=schemas.Service)
async def update_service(
    service_in: schemas.ServiceUpdate,
    id: int = Path(..., description="ID of the service"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Service:
    """Update a service's description."""
    return await identity_service.update_service(db, id, service_in)


@router.delete("/{id}", status_code=204)
async def delete_service(
    id: int = Path(..., description="ID of the service"),
    db: AsyncSession = Depends(deps.get_db),
) -> None:
    """Delete a service. Fails while any toggle state still references it."""
    await identity_service.delete_service(db, id)


@router.post("/key/{key}/start", response_model=schemas.ServiceStartResponse)
async def announce_service_start(
    key: str = Path(..., description="Key of the starting service"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.ServiceStartResponse:
    """Publish every toggle state of the service as a start message.

    Called by a service on boot so it receives its current toggle values on
    its topic.
    """
    published = await toggle_state_service.announce_service_start(db, key)
    return schemas.ServiceStartResponse(service_key=key, published=published)
