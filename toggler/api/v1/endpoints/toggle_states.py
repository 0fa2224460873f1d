"""API endpoints for toggle states."""

from typing import List

from fastapi import Depends, Path, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from toggler import schemas
from toggler.api import deps
from toggler.api.router import TrailingSlashRouter
from toggler.core.logging import ContextualLogger
from toggler.core.toggle_state_service import toggle_state_service

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.ToggleState])
async def list_toggle_states(
    db: AsyncSession = Depends(deps.get_db),
) -> List[schemas.ToggleState]:
    """List every toggle state. No ordering is guaranteed."""
    return await toggle_state_service.list_states(db)


@router.get(
    "/toggle/{toggle_key}/service/{service_key}",
    response_model=schemas.ToggleState,
)
async def get_toggle_state_by_keys(
    toggle_key: str = Path(..., description="Key of the toggle"),
    service_key: str = Path(..., description="Key of the service"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.ToggleState:
    """Get the toggle state of a toggle for a service, with both resolved."""
    return await toggle_state_service.get_state_by_keys(db, toggle_key, service_key)


@router.get("/{id}", response_model=schemas.ToggleState)
async def get_toggle_state(
    id: int = Path(..., description="ID of the toggle state"),
    db: AsyncSession = Depends(deps.get_db),
) -> schemas.ToggleState:
    """Get a toggle state by ID."""
    return await toggle_state_service.get_state(db, id)


@router.post("/", response_model=schemas.ToggleState, status_code=201)
async def create_toggle_state(
    toggle_state_in: schemas.ToggleStateCreate,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(deps.get_db),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> schemas.ToggleState:
    """Create a toggle state, or return the existing one for the same pair.

    If the toggle is already bound to the service the stored state is
    returned unchanged and the submitted value is ignored.
    """
    toggle_state = await toggle_state_service.create_or_get_state(db, toggle_state_in)
    response.headers["Location"] = str(request.url_for("get_toggle_state", id=toggle_state.id))
    logger.debug(f"Create-or-get returned toggle state {toggle_state.id}")
    return toggle_state


@router.put("/{id}", status_code=204)
async def update_toggle_state(
    toggle_state_in: schemas.ToggleStateUpdate,
    id: int = Path(..., description="ID of the toggle state to replace"),
    db: AsyncSession = Depends(deps.get_db),
) -> Response:
    """Replace a toggle state and notify the service's subscribers."""
    await toggle_state_service.update_state(db, id, toggle_state_in)
    return Response(status_code=204)


@router.patch("/{id}", status_code=204)
async def patch_toggle_state(
    toggle_state_in: schemas.ToggleStateUpdate,
    id: int = Path(..., description="ID of the toggle state to replace"),
    db: AsyncSession = Depends(deps.get_db),
) -> Response:
    """Replace a toggle state and notify the service's subscribers.

    Takes the full record like PUT; partial bodies are rejected by validation.
    """
    await toggle_state_service.patch_state(db, id, toggle_state_in)
    return Response(status_code=204)


@router.delete("/{id}", status_code=204)
async def delete_toggle_state(
    id: int = Path(..., description="ID of the toggle state to delete"),
    db: AsyncSession = Depends(deps.get_db),
) -> Response:
    """Delete a toggle state. Subscribers are not notified."""
    await toggle_state_service.delete_state(db, id)
    return Response(status_code=204)
