"""Service routes: health and render mode catalogue."""

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from notegraph.engine import GraphEngine
from notegraph.models import RENDER_MODES

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    notes_count: int
    render_available: bool
    version: str = "0.1.0"


class RenderModeInfoResponse(BaseModel):
    """Display metadata for one render mode."""

    id: str
    name: str
    description: str
    active: bool = False


def get_engine(request: Request) -> GraphEngine:
    """Get the graph engine from app state."""
    return request.app.state.engine


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Degraded while the renderer is in its unavailable state.
    """
    engine = get_engine(request)
    available = not engine.boundary.unavailable
    return HealthResponse(
        status="healthy" if available else "degraded",
        notes_count=len(engine.notes),
        render_available=available,
    )


@router.get("/graph/modes", response_model=list[RenderModeInfoResponse])
async def list_render_modes(request: Request) -> list[RenderModeInfoResponse]:
    """List render modes with names and descriptions."""
    engine = get_engine(request)
    return [
        RenderModeInfoResponse(**info.to_dict(), active=info.mode == engine.render_mode)
        for info in RENDER_MODES.values()
    ]
