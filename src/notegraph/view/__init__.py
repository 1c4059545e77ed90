"""Viewport, pointer interaction and rendering."""

from notegraph.view.interaction import (
    InteractionController,
    PointerEvent,
    PointerKind,
    PointerQueue,
)
from notegraph.view.renderer import GraphRenderer, Palette, RenderBoundary, Scene, truncate_label
from notegraph.view.surface import Surface, SurfaceFactory, SvgSurface
from notegraph.view.viewport import Viewport

__all__ = [
    # Viewport
    "Viewport",
    # Interaction
    "InteractionController",
    "PointerEvent",
    "PointerKind",
    "PointerQueue",
    # Rendering
    "GraphRenderer",
    "Palette",
    "RenderBoundary",
    "Scene",
    "truncate_label",
    "Surface",
    "SurfaceFactory",
    "SvgSurface",
]
