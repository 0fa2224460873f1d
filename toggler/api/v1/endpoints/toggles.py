"""API endpoints for toggles."""

from typing import List

from fastapi import Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from toggler import schemas
from toggler.api import deps
from toggler.api.router import TrailingSlashRouter
from toggler.core.exceptions import NotFoundException
from toggler.core.identity_service import identity_service

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.Toggle])
async def list_toggles(
    db: AsyncSession = Depends(deps.get_db),
) -> List[schemas.Toggle]:
    """List all toggles."""
    return await identity_service.list_toggles(db)


@router.post("/", response_model=schemas.Toggle, status_code=201)
async def create_toggle(
    toggle_in: schemas.ToggleCreate,
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Toggle:
    """Create a toggle. Keys are unique and cannot be changed later."""
    return await identity_service.create_toggle(db, toggle_in)


@router.get("/key/{key}", response_model=schemas.Toggle)
async def get_toggle_by_key(
    key: str = Path(..., description="Key of the toggle"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Toggle:
    """Get a toggle by its key."""
    toggle = await identity_service.find_toggle_by_key(db, key)
    if toggle is None:
        raise NotFoundException(f"Toggle '{key}' not found")
    return toggle


@router.get("/{id}", response_model=schemas.Toggle)
async def get_toggle(
    id: int = Path(..., description="ID of the toggle"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Toggle:
    """Get a toggle by ID."""
    return await identity_service.get_toggle(db, id)


@router.patch("/{id}", response_model=schemas.Toggle)
async def update_toggle(
    toggle_in: schemas.ToggleUpdate,
    id: int = Path(..., description="ID of the toggle"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.Toggle:
    """Update a toggle's description."""
    return await identity_service.update_toggle(db, id, toggle_in)


@router.delete("/{id}", status_code=204)
async def delete_toggle(
    id: int = Path(..., description="ID of the toggle"),
    db: AsyncSession = Depends(deps.get_db),
) -> None:
    """Delete a toggle. Fails while any toggle state still references it."""
    await identity_service.delete_toggle(db, id)
