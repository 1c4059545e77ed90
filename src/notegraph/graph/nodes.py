"""Turn notes into graph nodes with derived size, colour and position."""

import hashlib
import math
from collections.abc import Mapping, Sequence

from notegraph.config import settings
from notegraph.models import GraphNode, Note


def node_size(note: Note) -> float:
    """Size grows with body length and tag count, clamped to [min, max].

    The base size is the floor in practice: at the default 30 no node falls
    into the "small" filter bucket.
    """
    raw = (
        settings.node_base_size
        + (len(note.body) / 1000.0) * settings.node_size_per_kchar
        + len(note.tags) * settings.node_size_per_tag
    )
    return max(settings.node_min_size, min(settings.node_max_size, raw))


def tag_color(tag: str | None) -> str:
    """Stable HSL colour for a tag; untagged notes get the neutral colour."""
    if not tag:
        return settings.untagged_node_color
    digest = hashlib.md5(tag.encode("utf-8")).hexdigest()
    hue = int(digest[:8], 16) % 360
    return f"hsl({hue}, 70%, 60%)"


def initial_position(index: int, count: int, radius: float | None = None) -> tuple[float, float]:
    """Evenly spaced point on a circle around the graph origin."""
    r = settings.node_initial_radius if radius is None else radius
    if count <= 0:
        return 0.0, 0.0
    angle = (index / count) * 2 * math.pi
    return math.cos(angle) * r, math.sin(angle) * r


def build_nodes(
    notes: Sequence[Note],
    overrides: Mapping[str, tuple[float, float]] | None = None,
) -> list[GraphNode]:
    """Build one node per note, in note order.

    Manual position overrides take priority over the computed circle layout.
    """
    overrides = overrides or {}
    count = len(notes)
    nodes: list[GraphNode] = []
    for index, note in enumerate(notes):
        x, y = overrides.get(note.id) or initial_position(index, count)
        nodes.append(
            GraphNode(
                id=note.id,
                title=note.title,
                x=float(x),
                y=float(y),
                size=node_size(note),
                color=tag_color(note.primary_tag),
                tags=note.tags,
            )
        )
    return nodes
