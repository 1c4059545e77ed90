"""Pointer gestures: node drag, canvas pan, click selection and hover."""

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from notegraph.config import settings
from notegraph.graph.positions import PositionStore
from notegraph.layout import LayoutSimulator
from notegraph.models import GraphNode
from notegraph.view.viewport import Viewport

logger = logging.getLogger(__name__)

SelectCallback = Callable[[str | None], None]
HoverCallback = Callable[[str | None], None]


class PointerKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer input in screen pixels."""

    kind: PointerKind
    x: float = 0.0
    y: float = 0.0


class PointerQueue:
    """Per-frame pointer buffer.

    Consecutive moves collapse into the latest one; downs and ups are kept
    in order so no gesture boundary is lost.
    """

    def __init__(self) -> None:
        self._events: list[PointerEvent] = []

    def push(self, event: PointerEvent) -> None:
        if (
            event.kind == PointerKind.MOVE
            and self._events
            and self._events[-1].kind == PointerKind.MOVE
        ):
            self._events[-1] = event
        else:
            self._events.append(event)

    def drain(self) -> list[PointerEvent]:
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)


@dataclass
class _Drag:
    node_id: str
    start: tuple[float, float]
    offset: tuple[float, float]  # Node minus pointer, graph space
    travel: float = 0.0


@dataclass
class _Pan:
    start: tuple[float, float]
    last: tuple[float, float]
    travel: float = 0.0


class InteractionController:
    """
    Turns pointer events into simulator, viewport and selection changes.

    A press on a node drags it; a press on empty canvas pans. Releasing
    within `click_tolerance` pixels of the press is a click.
    """

    def __init__(
        self,
        viewport: Viewport,
        simulator: LayoutSimulator,
        positions: PositionStore,
        click_tolerance: float | None = None,
        on_select: SelectCallback | None = None,
        on_hover: HoverCallback | None = None,
    ) -> None:
        self.viewport = viewport
        self.simulator = simulator
        self.positions = positions
        self.click_tolerance = (
            click_tolerance if click_tolerance is not None else settings.click_tolerance
        )
        self.on_select = on_select
        self.on_hover = on_hover

        self.selected_id: str | None = None
        self.hovered_id: str | None = None
        self._gesture: _Drag | _Pan | None = None

    @property
    def dragging_id(self) -> str | None:
        return self._gesture.node_id if isinstance(self._gesture, _Drag) else None

    @property
    def is_panning(self) -> bool:
        return isinstance(self._gesture, _Pan)

    def handle(self, event: PointerEvent, nodes: Sequence[GraphNode]) -> None:
        if event.kind == PointerKind.DOWN:
            self.pointer_down(event.x, event.y, nodes)
        elif event.kind == PointerKind.MOVE:
            self.pointer_move(event.x, event.y, nodes)
        elif event.kind == PointerKind.UP:
            self.pointer_up(event.x, event.y, nodes)
        else:
            self.pointer_leave()

    def pointer_down(self, x: float, y: float, nodes: Sequence[GraphNode]) -> None:
        if self._gesture is not None:
            # Missed the release; finish the previous gesture first
            self.pointer_up(x, y, nodes)

        hit = self.viewport.hit_test(nodes, x, y)
        if hit is None:
            self._gesture = _Pan(start=(x, y), last=(x, y))
            return

        gx, gy = self.viewport.screen_to_graph(x, y)
        nx, ny = self.simulator.position(hit.id)
        self.simulator.drag_start(hit.id)
        self._gesture = _Drag(node_id=hit.id, start=(x, y), offset=(nx - gx, ny - gy))

    def pointer_move(self, x: float, y: float, nodes: Sequence[GraphNode]) -> None:
        gesture = self._gesture
        if gesture is None:
            hit = self.viewport.hit_test(nodes, x, y)
            self._set_hover(hit.id if hit else None)
            return

        travel = math.hypot(x - gesture.start[0], y - gesture.start[1])
        gesture.travel = max(gesture.travel, travel)
        if isinstance(gesture, _Drag):
            gx, gy = self.viewport.screen_to_graph(x, y)
            self.simulator.drag_move(
                gesture.node_id, gx + gesture.offset[0], gy + gesture.offset[1]
            )
        else:
            self.viewport.pan_by(x - gesture.last[0], y - gesture.last[1])
            gesture.last = (x, y)

    def pointer_up(self, x: float, y: float, nodes: Sequence[GraphNode]) -> None:
        gesture = self._gesture
        if gesture is None:
            return
        self.pointer_move(x, y, nodes)
        self._gesture = None
        is_click = gesture.travel < self.click_tolerance

        if isinstance(gesture, _Drag):
            # A drop becomes an override, so the node stays where it landed
            position = self.simulator.drag_end(gesture.node_id, pin=not is_click)
            if is_click:
                self._select(gesture.node_id)
            else:
                self.positions.set(gesture.node_id, position)
                logger.debug(f"Stored override for {gesture.node_id}: {position}")
        elif is_click:
            self._select(None)

    def pointer_leave(self) -> None:
        """Pointer left the canvas: end any pan, clear hover.

        A node drag is not cancelled; the release will still arrive.
        """
        if isinstance(self._gesture, _Pan):
            self._gesture = None
        self._set_hover(None)

    def wheel(self, delta_y: float, anchor: tuple[float, float] | None = None) -> float:
        return self.viewport.wheel(delta_y, anchor)

    def forget(self, surviving_ids: set[str]) -> None:
        """Drop selection, hover or drag state for nodes that no longer exist."""
        if self.selected_id is not None and self.selected_id not in surviving_ids:
            self.selected_id = None
        if self.hovered_id is not None and self.hovered_id not in surviving_ids:
            self._set_hover(None)
        if isinstance(self._gesture, _Drag) and self._gesture.node_id not in surviving_ids:
            self._gesture = None

    def _select(self, node_id: str | None) -> None:
        self.selected_id = node_id
        logger.debug(f"Selected: {node_id}")
        if self.on_select is not None:
            self.on_select(node_id)

    def _set_hover(self, node_id: str | None) -> None:
        if node_id == self.hovered_id:
            return
        self.hovered_id = node_id
        if self.on_hover is not None:
            self.on_hover(node_id)
