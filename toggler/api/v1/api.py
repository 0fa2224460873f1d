"""API routes for version 1."""

from fastapi import APIRouter

from toggler.api.v1.endpoints import services, toggle_states, toggles

api_router = APIRouter()
api_router.include_router(toggle_states.router, prefix="/toggle-states", tags=["toggle-states"])
api_router.include_router(toggles.router, prefix="/toggles", tags=["toggles"])
api_router.include_router(services.router, prefix="/services", tags=["services"])
