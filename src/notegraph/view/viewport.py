"""Viewport: zoom, pan and the screen <-> graph coordinate mapping."""

import logging
import math
from collections.abc import Sequence

from notegraph.config import settings
from notegraph.models import GraphNode

logger = logging.getLogger(__name__)


class Viewport:
    """
    Zoom and pan state for one canvas.

    Graph coordinates are centred on the canvas: graph (0, 0) maps to the
    canvas centre at zoom 1 and pan (0, 0).
    """

    def __init__(
        self,
        width: float | None = None,
        height: float | None = None,
        zoom_min: float | None = None,
        zoom_max: float | None = None,
        zoom_step: float | None = None,
    ) -> None:
        self.width = float(width if width is not None else settings.canvas_width)
        self.height = float(height if height is not None else settings.canvas_height)
        self.zoom_min = zoom_min if zoom_min is not None else settings.zoom_min
        self.zoom_max = zoom_max if zoom_max is not None else settings.zoom_max
        self.zoom_step = zoom_step if zoom_step is not None else settings.zoom_step
        if not 0 < self.zoom_min <= self.zoom_max:
            raise ValueError(f"Invalid zoom bounds: [{self.zoom_min}, {self.zoom_max}]")
        if self.zoom_step <= 0:
            raise ValueError(f"zoom_step must be positive, got {self.zoom_step}")

        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def resize(self, width: float, height: float) -> None:
        if width > 0 and height > 0:
            self.width, self.height = float(width), float(height)

    # ------------------------------------------------------------------
    # Zoom / pan
    # ------------------------------------------------------------------

    def set_zoom(self, zoom: float, anchor: tuple[float, float] | None = None) -> float:
        """Set zoom, clamped to [zoom_min, zoom_max].

        With `anchor` (screen pixels) the graph point under the anchor stays
        put; otherwise zoom is about the canvas centre. NaN is ignored.
        """
        if zoom != zoom:
            logger.debug("Ignoring NaN zoom")
            return self.zoom
        new_zoom = max(self.zoom_min, min(self.zoom_max, zoom))
        if new_zoom == self.zoom:
            return self.zoom

        if anchor is None:
            ratio = new_zoom / self.zoom
            self.pan_x *= ratio
            self.pan_y *= ratio
        else:
            gx, gy = self.screen_to_graph(*anchor)
            self.zoom = new_zoom
            sx, sy = self.graph_to_screen(gx, gy)
            self.pan_x += anchor[0] - sx
            self.pan_y += anchor[1] - sy
        self.zoom = new_zoom
        return self.zoom

    def zoom_in(self, anchor: tuple[float, float] | None = None) -> float:
        return self.set_zoom(self.zoom * self.zoom_step, anchor)

    def zoom_out(self, anchor: tuple[float, float] | None = None) -> float:
        return self.set_zoom(self.zoom / self.zoom_step, anchor)

    def wheel(self, delta_y: float, anchor: tuple[float, float] | None = None) -> float:
        """Wheel input: negative delta zooms in, positive zooms out."""
        if delta_y < 0:
            return self.zoom_in(anchor)
        if delta_y > 0:
            return self.zoom_out(anchor)
        return self.zoom

    def pan_by(self, dx: float, dy: float) -> None:
        if not (math.isfinite(dx) and math.isfinite(dy)):
            return
        self.pan_x += dx
        self.pan_y += dy

    def reset(self) -> None:
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    # ------------------------------------------------------------------
    # Coordinate mapping
    # ------------------------------------------------------------------

    def screen_to_graph(self, px: float, py: float) -> tuple[float, float]:
        return (
            (px - self.pan_x - self.width / 2) / self.zoom,
            (py - self.pan_y - self.height / 2) / self.zoom,
        )

    def graph_to_screen(self, gx: float, gy: float) -> tuple[float, float]:
        return (
            gx * self.zoom + self.pan_x + self.width / 2,
            gy * self.zoom + self.pan_y + self.height / 2,
        )

    def visible_bounds(self) -> tuple[float, float, float, float]:
        """Graph-space rectangle (x0, y0, x1, y1) currently on screen."""
        x0, y0 = self.screen_to_graph(0, 0)
        x1, y1 = self.screen_to_graph(self.width, self.height)
        return x0, y0, x1, y1

    def hit_test(self, nodes: Sequence[GraphNode], px: float, py: float) -> GraphNode | None:
        """Front-most node under the screen point, or None.

        Nodes are drawn in list order, so the last matching node wins.
        """
        gx, gy = self.screen_to_graph(px, py)
        for node in reversed(nodes):
            if math.hypot(node.x - gx, node.y - gy) <= node.radius:
                return node
        return None

    def to_dict(self) -> dict:
        return {
            "zoom": self.zoom,
            "pan_x": self.pan_x,
            "pan_y": self.pan_y,
            "width": self.width,
            "height": self.height,
        }
