"""FastAPI application for notegraph.

Serves one graph engine over HTTP: note loading, mode and filter changes,
viewport control, frame stepping, SVG rendering and statistics.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notegraph.api.graph import router as graph_router
from notegraph.api.routes import router
from notegraph.config import settings
from notegraph.engine import GraphEngine
from notegraph.storage import InMemoryNoteStore, InMemoryPreferenceStore

logger = logging.getLogger(__name__)


def _log_selection(note_id: str | None) -> None:
    logger.info(f"Selected note: {note_id}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting notegraph API...")
    logger.info(
        f"Thresholds: quality={settings.quality_node_threshold}, "
        f"performance={settings.performance_node_threshold}"
    )

    engine = GraphEngine(
        note_store=InMemoryNoteStore(),
        preferences=InMemoryPreferenceStore(),
        on_select=_log_selection,
    )
    engine.load_notes()
    app.state.engine = engine
    logger.info(f"Graph engine ready (render mode: {engine.render_mode.value})")

    yield

    logger.info("Shutting down notegraph API...")
    engine.stop_simulation()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="notegraph",
        description="Interactive knowledge graph of notes with force-directed layout",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(graph_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "notegraph.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
