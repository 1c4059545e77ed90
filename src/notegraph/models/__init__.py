"""notegraph data models."""

from notegraph.models.graph import (
    GraphData,
    GraphLink,
    GraphNode,
    LinkType,
    OptimizationLevel,
    RENDER_MODES,
    PerformanceMode,
    RenderMode,
    RenderModeInfo,
    clamp_strength,
)
from notegraph.models.note import Note, parse_datetime

__all__ = [
    "Note",
    "parse_datetime",
    "GraphNode",
    "GraphLink",
    "GraphData",
    "LinkType",
    "RenderMode",
    "RenderModeInfo",
    "RENDER_MODES",
    "PerformanceMode",
    "OptimizationLevel",
    "clamp_strength",
]
