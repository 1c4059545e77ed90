"""Drawing surfaces the renderer paints onto."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from html import escape
from typing import Protocol


class Surface(Protocol):
    """Minimal 2D drawing target."""

    def begin(self, width: float, height: float, background: str) -> None: ...

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        stroke: str,
        width: float = 1.0,
        opacity: float = 1.0,
    ) -> None: ...

    def circle(
        self,
        cx: float,
        cy: float,
        r: float,
        fill: str,
        stroke: str | None = None,
        stroke_width: float = 0.0,
        opacity: float = 1.0,
    ) -> None: ...

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: str = "none",
        stroke: str | None = None,
        stroke_width: float = 0.0,
        opacity: float = 1.0,
    ) -> None: ...

    def text(
        self,
        x: float,
        y: float,
        content: str,
        fill: str,
        size: float = 12.0,
        anchor: str = "middle",
    ) -> None: ...

    def group(self, translate: tuple[float, float] = (0.0, 0.0), scale: float = 1.0): ...

    def finish(self) -> str: ...


SurfaceFactory = Callable[[], Surface]


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


class SvgSurface:
    """Builds an SVG document in memory."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._depth = 0

    def begin(self, width: float, height: float, background: str) -> None:
        self._parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" '
            f'height="{_num(height)}" viewBox="0 0 {_num(width)} {_num(height)}">',
            f'<rect x="0" y="0" width="{_num(width)}" height="{_num(height)}" '
            f'fill="{escape(background)}"/>',
        ]
        self._depth = 0

    def line(self, x1, y1, x2, y2, stroke, width=1.0, opacity=1.0) -> None:
        self._parts.append(
            f'<line x1="{_num(x1)}" y1="{_num(y1)}" x2="{_num(x2)}" y2="{_num(y2)}" '
            f'stroke="{escape(stroke)}" stroke-width="{_num(width)}" '
            f'stroke-opacity="{_num(opacity)}"/>'
        )

    def circle(self, cx, cy, r, fill, stroke=None, stroke_width=0.0, opacity=1.0) -> None:
        stroke_attr = (
            f' stroke="{escape(stroke)}" stroke-width="{_num(stroke_width)}"' if stroke else ""
        )
        self._parts.append(
            f'<circle cx="{_num(cx)}" cy="{_num(cy)}" r="{_num(r)}" fill="{escape(fill)}"'
            f'{stroke_attr} opacity="{_num(opacity)}"/>'
        )

    def rect(self, x, y, width, height, fill="none", stroke=None, stroke_width=0.0, opacity=1.0) -> None:
        stroke_attr = (
            f' stroke="{escape(stroke)}" stroke-width="{_num(stroke_width)}"' if stroke else ""
        )
        self._parts.append(
            f'<rect x="{_num(x)}" y="{_num(y)}" width="{_num(width)}" height="{_num(height)}" '
            f'fill="{escape(fill)}"{stroke_attr} opacity="{_num(opacity)}"/>'
        )

    def text(self, x, y, content, fill, size=12.0, anchor="middle") -> None:
        self._parts.append(
            f'<text x="{_num(x)}" y="{_num(y)}" fill="{escape(fill)}" '
            f'font-size="{_num(size)}" text-anchor="{escape(anchor)}" '
            f'font-family="sans-serif">{escape(content)}</text>'
        )

    @contextmanager
    def group(self, translate: tuple[float, float] = (0.0, 0.0), scale: float = 1.0) -> Iterator[None]:
        self._parts.append(
            f'<g transform="translate({_num(translate[0])},{_num(translate[1])}) '
            f'scale({scale:.4f})">'
        )
        self._depth += 1
        try:
            yield
        finally:
            self._parts.append("</g>")
            self._depth -= 1

    def finish(self) -> str:
        self._parts.extend("</g>" for _ in range(self._depth))
        self._depth = 0
        self._parts.append("</svg>")
        return "\n".join(self._parts)
