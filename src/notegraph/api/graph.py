"""Graph endpoints: notes, modes, filters, viewport, frames and rendering."""

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field

from notegraph.api.routes import get_engine
from notegraph.models import RENDER_MODES, Note

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/graph")


# ============================================================================
# Request / Response Models
# ============================================================================


class NoteIn(BaseModel):
    """A note record; camelCase timestamps are accepted."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    body: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: str | float | None = Field(default=None, alias="createdAt")
    updated_at: str | float | None = Field(default=None, alias="updatedAt")

    def to_note(self) -> Note:
        return Note.from_dict(self.model_dump())


class NotesRequest(BaseModel):
    notes: list[NoteIn]


class NotesResponse(BaseModel):
    notes_count: int
    visible_nodes: int
    visible_links: int


class ModeRequest(BaseModel):
    mode: str


class RenderModeResponse(BaseModel):
    mode: str
    name: str
    description: str


class PerformanceModeResponse(BaseModel):
    mode: str
    level: str


class FiltersRequest(BaseModel):
    """Filter criteria. Unknown bucket values mean "all"."""

    search: str = ""
    tags: list[str] = Field(default_factory=list)
    date: str = "all"
    content: str = "all"
    size: str = "all"


class ZoomRequest(BaseModel):
    """Zoom step, wheel delta or absolute zoom, optionally about an anchor."""

    action: Literal["in", "out", "set", "wheel"] = "in"
    zoom: float | None = None
    delta_y: float = 0.0
    anchor_x: float | None = None
    anchor_y: float | None = None

    @property
    def anchor(self) -> tuple[float, float] | None:
        if self.anchor_x is None or self.anchor_y is None:
            return None
        return self.anchor_x, self.anchor_y


class PanRequest(BaseModel):
    dx: float
    dy: float


class ViewportResponse(BaseModel):
    zoom: float
    pan_x: float
    pan_y: float
    width: float
    height: float


class TickRequest(BaseModel):
    frames: int = Field(default=1, ge=1, le=1000)
    running: bool | None = None  # Start or pause the simulation first


class TickResponse(BaseModel):
    ticks: int
    alpha: float
    idle: bool
    running: bool


class PointerRequest(BaseModel):
    kind: Literal["down", "move", "up", "leave"]
    x: float = 0.0
    y: float = 0.0
    apply: bool = True  # Run a frame step right away


class PointerResponse(BaseModel):
    selected_id: str | None
    hovered_id: str | None
    dragging_id: str | None


# ============================================================================
# Notes and modes
# ============================================================================


@router.put("/notes", response_model=NotesResponse)
async def replace_notes(request: Request, body: NotesRequest) -> NotesResponse:
    """Replace the note set and recompute the graph."""
    engine = get_engine(request)
    engine.note_store.replace_all(note.to_note() for note in body.notes)
    engine.load_notes()
    logger.info(f"Loaded {len(engine.notes)} notes")
    return NotesResponse(
        notes_count=len(engine.notes),
        visible_nodes=len(engine.result.nodes),
        visible_links=len(engine.result.links),
    )


@router.get("/data")
async def get_graph_data(request: Request) -> dict:
    """Render-ready nodes (current positions) and links."""
    engine = get_engine(request)
    data = engine.render_ready().to_dict()
    data["render_mode"] = engine.render_mode.value
    data["performance_mode"] = engine.performance_mode.value
    data["filters"] = engine.filters.to_dict()
    data["optimization"] = engine.result.to_dict()
    return data


@router.post("/render-mode", response_model=RenderModeResponse)
async def set_render_mode(request: Request, body: ModeRequest) -> RenderModeResponse:
    """Switch link strategy. Unknown modes fall back to internal links."""
    mode = get_engine(request).set_render_mode(body.mode)
    info = RENDER_MODES[mode]
    return RenderModeResponse(mode=mode.value, name=info.name, description=info.description)


@router.post("/performance-mode", response_model=PerformanceModeResponse)
async def set_performance_mode(request: Request, body: ModeRequest) -> PerformanceModeResponse:
    engine = get_engine(request)
    mode = engine.set_performance_mode(body.mode)
    return PerformanceModeResponse(mode=mode.value, level=engine.result.level.value)


@router.post("/filters")
async def set_filters(request: Request, body: FiltersRequest) -> dict:
    engine = get_engine(request)
    criteria = engine.set_filters(body.model_dump())
    return {
        "filters": criteria.to_dict(),
        "visible_nodes": len(engine.result.nodes),
        "visible_links": len(engine.result.links),
    }


# ============================================================================
# Viewport
# ============================================================================


def _viewport_response(request: Request) -> ViewportResponse:
    return ViewportResponse(**get_engine(request).viewport.to_dict())


@router.post("/viewport/zoom", response_model=ViewportResponse)
async def zoom(request: Request, body: ZoomRequest) -> ViewportResponse:
    engine = get_engine(request)
    viewport = engine.viewport
    if body.action == "in":
        viewport.zoom_in(body.anchor)
    elif body.action == "out":
        viewport.zoom_out(body.anchor)
    elif body.action == "wheel":
        engine.wheel(body.delta_y, body.anchor)
    else:
        if body.zoom is None:
            raise HTTPException(status_code=422, detail="zoom is required for action 'set'")
        viewport.set_zoom(body.zoom, body.anchor)
    return _viewport_response(request)


@router.post("/viewport/pan", response_model=ViewportResponse)
async def pan(request: Request, body: PanRequest) -> ViewportResponse:
    get_engine(request).viewport.pan_by(body.dx, body.dy)
    return _viewport_response(request)


@router.post("/viewport/reset", response_model=ViewportResponse)
async def reset_viewport(request: Request) -> ViewportResponse:
    get_engine(request).viewport.reset()
    return _viewport_response(request)


# ============================================================================
# Frames and input
# ============================================================================


@router.post("/tick", response_model=TickResponse)
async def tick(request: Request, body: TickRequest | None = None) -> TickResponse:
    """Advance the layout by one or more frames without rendering."""
    engine = get_engine(request)
    body = body or TickRequest()
    if body.running is True:
        engine.start_simulation()
    elif body.running is False:
        engine.stop_simulation()

    ticks = 0
    for _ in range(body.frames):
        if not engine.step():
            break
        ticks += 1
    return TickResponse(
        ticks=ticks,
        alpha=engine.simulator.alpha,
        idle=engine.simulator.is_idle,
        running=engine.simulator.running,
    )


@router.post("/pointer", response_model=PointerResponse)
async def pointer(request: Request, body: PointerRequest) -> PointerResponse:
    """Queue pointer input in screen pixels."""
    engine = get_engine(request)
    engine.queue_pointer(body.kind, body.x, body.y)
    if body.apply:
        engine.step()
    return PointerResponse(
        selected_id=engine.selected_id,
        hovered_id=engine.hovered_id,
        dragging_id=engine.interaction.dragging_id,
    )


# ============================================================================
# Rendering and stats
# ============================================================================


def _svg_or_503(request: Request, svg: str | None) -> Response:
    if svg is None:
        error = get_engine(request).boundary.error or "Renderer unavailable"
        raise HTTPException(status_code=503, detail=error)
    return Response(content=svg, media_type="image/svg+xml")


@router.get("/render.svg")
async def render_svg(request: Request) -> Response:
    """Render the current frame. 503 while the renderer is unavailable."""
    return _svg_or_503(request, get_engine(request).render())


@router.post("/render/retry")
async def retry_render(request: Request) -> Response:
    return _svg_or_503(request, get_engine(request).retry_render())


@router.get("/stats")
async def get_stats(request: Request) -> dict:
    """Graph statistics, optimization summary and performance score."""
    engine = get_engine(request)
    return {
        "stats": engine.stats().to_dict(),
        "optimization": engine.result.to_dict(),
        "performance": engine.performance().to_dict(),
        "render_mode": engine.render_mode.value,
        "performance_mode": engine.performance_mode.value,
    }
