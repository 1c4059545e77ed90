"""Graph renderer and the error boundary around it.

The renderer paints one frame onto a Surface:
1. Background
2. Links, then nodes (with labels and tag indicators) in graph space
3. Legend and minimap in screen space
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from notegraph.config import settings
from notegraph.errors import SurfaceUnavailableError
from notegraph.models import RENDER_MODES, GraphLink, GraphNode, LinkType, RenderMode
from notegraph.view.surface import Surface, SurfaceFactory, SvgSurface
from notegraph.view.viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass
class Palette:
    """Colours used by the renderer."""

    background: str = "#1a1a2e"
    text: str = "#ffffff"
    text_secondary: str = "#a0a0b8"
    node_stroke: str = "#ffffff"
    selected_fill: str = "#007bff"
    selected_stroke: str = "#0056b3"
    hovered_fill: str = "#0056b3"
    panel: str = "#10101c"
    viewport_outline: str = "#5eead4"
    links: dict[LinkType, str] = field(
        default_factory=lambda: {
            LinkType.INTERNAL: "#3b82f6",
            LinkType.TAG: "#10b981",
            LinkType.SIMILARITY: "#a855f7",
            LinkType.HIERARCHICAL: "#f59e0b",
        }
    )

    def link_color(self, link_type: LinkType) -> str:
        return self.links.get(link_type, self.text_secondary)


@dataclass
class Scene:
    """Everything one frame needs. Nodes carry their current positions."""

    nodes: Sequence[GraphNode]
    links: Sequence[GraphLink]
    viewport: Viewport
    render_mode: RenderMode = RenderMode.INTERNAL
    selected_id: str | None = None
    hovered_id: str | None = None


def link_opacity(strength: float) -> float:
    return min(1.0, 0.6 * strength)


def link_width(strength: float) -> float:
    return 1.0 + strength


def truncate_label(title: str, size: float, char_width: float | None = None) -> str:
    """Shorten `title` to fit `size * 1.5` pixels, ending in '...'."""
    width = char_width if char_width is not None else settings.label_char_width
    if width <= 0:
        raise ValueError(f"char_width must be positive, got {width}")
    max_chars = max(3, int(size * 1.5 / width))
    if len(title) <= max_chars:
        return title
    return title[: max(1, max_chars - 3)] + "..."


class GraphRenderer:
    """Draws a Scene onto a fresh surface and returns the document."""

    def __init__(
        self,
        surface_factory: SurfaceFactory | None = None,
        palette: Palette | None = None,
        minimap_size: tuple[float, float] | None = None,
        show_legend: bool = True,
        show_minimap: bool = True,
    ) -> None:
        self.surface_factory = surface_factory or SvgSurface
        self.palette = palette or Palette()
        self.minimap_size = (
            minimap_size if minimap_size is not None else (settings.minimap_width, settings.minimap_height)
        )
        self.show_legend = show_legend
        self.show_minimap = show_minimap

    def render(self, scene: Scene) -> str:
        surface = self._create_surface()
        viewport = scene.viewport
        surface.begin(viewport.width, viewport.height, self.palette.background)

        origin = (viewport.pan_x + viewport.width / 2, viewport.pan_y + viewport.height / 2)
        with surface.group(translate=origin, scale=viewport.zoom):
            self._draw_links(surface, scene)
            self._draw_nodes(surface, scene)

        if self.show_legend:
            self._draw_legend(surface, scene)
        if self.show_minimap:
            self._draw_minimap(surface, scene)
        return surface.finish()

    def _create_surface(self) -> Surface:
        try:
            surface = self.surface_factory()
        except SurfaceUnavailableError:
            raise
        except Exception as e:
            raise SurfaceUnavailableError(f"Could not create drawing surface: {e}") from e
        if surface is None:
            raise SurfaceUnavailableError("No drawing surface available")
        return surface

    def _draw_links(self, surface: Surface, scene: Scene) -> None:
        by_id = {node.id: node for node in scene.nodes}
        hovered = scene.hovered_id
        for link in scene.links:
            source = by_id.get(link.source)
            target = by_id.get(link.target)
            if source is None or target is None:
                continue
            opacity = link_opacity(link.strength)
            if hovered is not None:
                opacity = 1.0 if link.touches(hovered) else opacity * 0.2
            surface.line(
                source.x,
                source.y,
                target.x,
                target.y,
                stroke=self.palette.link_color(link.type),
                width=link_width(link.strength),
                opacity=opacity,
            )

    def _draw_nodes(self, surface: Surface, scene: Scene) -> None:
        palette = self.palette
        for node in scene.nodes:
            selected = node.id == scene.selected_id
            hovered = node.id == scene.hovered_id
            if selected:
                fill, stroke, stroke_width = palette.selected_fill, palette.selected_stroke, 3.0
            elif hovered:
                fill, stroke, stroke_width = palette.hovered_fill, palette.node_stroke, 3.0
            else:
                fill, stroke, stroke_width = node.color, palette.node_stroke, 2.0
            surface.circle(node.x, node.y, node.radius, fill, stroke, stroke_width)
            surface.text(node.x, node.y + 4, truncate_label(node.title, node.size), palette.text, 12.0)

            # One dot per tag along the bottom edge, at most five
            shown = node.tags[:5]
            for i, _tag in enumerate(shown):
                offset = (i - (len(shown) - 1) / 2) * 6
                surface.circle(node.x + offset, node.y + node.radius - 4, 2.0, palette.text, opacity=0.8)

    def _draw_legend(self, surface: Surface, scene: Scene) -> None:
        palette = self.palette
        info = RENDER_MODES[scene.render_mode]
        surface.rect(10, 10, 280, 110, fill=palette.panel, opacity=0.85)
        surface.text(20, 30, info.name, palette.text, 14.0, anchor="start")
        surface.text(20, 48, info.description, palette.text_secondary, 10.0, anchor="start")
        surface.text(
            20,
            66,
            f"Nodes: {len(scene.nodes)}  Links: {len(scene.links)}",
            palette.text_secondary,
            11.0,
            anchor="start",
        )
        for i, link_type in enumerate(LinkType):
            x = 20 + i * 68
            surface.circle(x + 4, 92, 4.0, palette.link_color(link_type))
            surface.text(x + 12, 96, link_type.value.capitalize(), palette.text_secondary, 10.0, anchor="start")

    def _draw_minimap(self, surface: Surface, scene: Scene) -> None:
        palette = self.palette
        viewport = scene.viewport
        width, height = self.minimap_size
        left = viewport.width - width - 10
        top = viewport.height - height - 10
        surface.rect(left, top, width, height, fill=palette.panel, stroke=palette.text_secondary, stroke_width=1.0, opacity=0.85)

        vx0, vy0, vx1, vy1 = viewport.visible_bounds()
        xs = [n.x for n in scene.nodes] + [vx0, vx1]
        ys = [n.y for n in scene.nodes] + [vy0, vy1]
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)
        span = max(max_x - min_x, max_y - min_y, 1.0)
        scale = min(width, height) / span * 0.9

        def project(x: float, y: float) -> tuple[float, float]:
            return (
                left + width / 2 + (x - (min_x + max_x) / 2) * scale,
                top + height / 2 + (y - (min_y + max_y) / 2) * scale,
            )

        for node in scene.nodes:
            mx, my = project(node.x, node.y)
            surface.circle(mx, my, max(1.0, node.radius * scale), node.color)

        rx0, ry0 = project(vx0, vy0)
        rx1, ry1 = project(vx1, vy1)
        surface.rect(rx0, ry0, rx1 - rx0, ry1 - ry0, stroke=palette.viewport_outline, stroke_width=1.0)


class RenderBoundary:
    """
    Catches rendering failures so the hosting view never sees them.

    After a failure the boundary is `unavailable` and holds the message
    until `retry()` succeeds.
    """

    def __init__(self, renderer: GraphRenderer) -> None:
        self.renderer = renderer
        self.error: str | None = None
        self.last_output: str | None = None
        self._last_scene: Scene | None = None

    @property
    def unavailable(self) -> bool:
        return self.error is not None

    def render(self, scene: Scene) -> str | None:
        """Render `scene`; returns None while unavailable."""
        self._last_scene = scene
        if self.unavailable:
            return None
        return self._attempt(scene)

    def retry(self, scene: Scene | None = None) -> str | None:
        """Clear the failure and render again."""
        self.error = None
        scene = scene or self._last_scene
        if scene is None:
            return None
        self._last_scene = scene
        return self._attempt(scene)

    def fail(self, error: Exception) -> None:
        """Enter the unavailable state for an error raised before rendering."""
        self.error = str(error) or error.__class__.__name__

    def _attempt(self, scene: Scene) -> str | None:
        try:
            self.last_output = self.renderer.render(scene)
        except Exception as e:
            logger.exception(f"Graph render failed: {e}")
            self.error = str(e) or e.__class__.__name__
            return None
        return self.last_output
