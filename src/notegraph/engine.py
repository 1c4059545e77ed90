"""Graph engine: one instance per graph view.

Owns the notes and view state and runs the pipeline:
notes -> nodes -> links -> filter -> optimize -> layout -> render
"""

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime

from notegraph.config import settings
from notegraph.graph.filters import FilterCriteria, filter_links, filter_nodes
from notegraph.graph.links import LinkGenerator
from notegraph.graph.metrics import GraphStats, PerformanceReport, compute_stats, performance_report
from notegraph.graph.nodes import build_nodes
from notegraph.graph.optimization import OptimizationGovernor, OptimizationResult
from notegraph.graph.positions import PositionStore
from notegraph.layout import LayoutSimulator
from notegraph.models import GraphData, GraphNode, Note, PerformanceMode, RenderMode
from notegraph.models.note import utcnow
from notegraph.storage import InMemoryNoteStore, InMemoryPreferenceStore, NoteStore, PreferenceStore
from notegraph.view import (
    GraphRenderer,
    InteractionController,
    PointerEvent,
    PointerKind,
    PointerQueue,
    RenderBoundary,
    Scene,
    Viewport,
)
from notegraph.view.interaction import HoverCallback, SelectCallback

logger = logging.getLogger(__name__)


class GraphEngine:
    """
    Glue between the pipeline stages, the simulator and the view.

    Any change to notes, render mode, performance mode or filters runs a
    synchronous `recompute()`. `frame()` is called once per display frame.
    """

    def __init__(
        self,
        note_store: NoteStore | None = None,
        preferences: PreferenceStore | None = None,
        link_generator: LinkGenerator | None = None,
        governor: OptimizationGovernor | None = None,
        simulator: LayoutSimulator | None = None,
        viewport: Viewport | None = None,
        renderer: GraphRenderer | None = None,
        on_select: SelectCallback | None = None,
        on_hover: HoverCallback | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.note_store = note_store if note_store is not None else InMemoryNoteStore()
        self.preferences = preferences or InMemoryPreferenceStore()
        self.link_generator = link_generator or LinkGenerator()
        self.governor = governor or OptimizationGovernor()
        self.simulator = simulator or LayoutSimulator()
        self.viewport = viewport or Viewport()
        self.boundary = RenderBoundary(renderer or GraphRenderer())
        self.positions = PositionStore()
        self.interaction = InteractionController(
            self.viewport,
            self.simulator,
            self.positions,
            on_select=on_select,
            on_hover=on_hover,
        )
        self.clock = clock or utcnow

        self.render_mode = RenderMode.parse(
            self.preferences.get(settings.render_mode_preference_key),
            RenderMode.parse(settings.default_render_mode),
        )
        self.performance_mode = PerformanceMode.parse(settings.default_performance_mode)
        self.filters = FilterCriteria()

        self.notes: list[Note] = []
        self.result: OptimizationResult = self.governor.optimize([], [], self.performance_mode)
        self.last_render_ms: float | None = None
        self._pointer = PointerQueue()

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def load_notes(self) -> None:
        """Reload notes from the note store."""
        self.set_notes(self.note_store.list_notes())

    def set_notes(self, notes: Sequence[Note]) -> None:
        self.notes = list(notes)
        self.recompute()

    def set_render_mode(self, mode: RenderMode | str) -> RenderMode:
        """Switch link strategy; the choice is persisted as a preference."""
        self.render_mode = RenderMode.parse(mode)
        self.preferences.set(settings.render_mode_preference_key, self.render_mode.value)
        logger.info(f"Render mode: {self.render_mode.value}")
        self.recompute()
        return self.render_mode

    def set_performance_mode(self, mode: PerformanceMode | str) -> PerformanceMode:
        self.performance_mode = PerformanceMode.parse(mode)
        logger.info(f"Performance mode: {self.performance_mode.value}")
        self.recompute()
        return self.performance_mode

    def set_filters(self, criteria: FilterCriteria | dict | None) -> FilterCriteria:
        if criteria is None:
            criteria = FilterCriteria()
        elif isinstance(criteria, dict):
            criteria = FilterCriteria.from_dict(criteria)
        self.filters = criteria
        self.recompute()
        return self.filters

    def recompute(self) -> OptimizationResult:
        """Run the pipeline and hand the render-ready graph to the simulator.

        A failing stage leaves the previous result in place and puts the
        render boundary into its unavailable state.
        """
        try:
            return self._run_pipeline()
        except Exception as e:
            logger.exception(f"Graph pipeline failed: {e}")
            self.boundary.fail(e)
            return self.result

    def _run_pipeline(self) -> OptimizationResult:
        overrides = self.positions.as_dict()
        notes_by_id = {note.id: note for note in self.notes}

        nodes = build_nodes(self.notes, overrides)
        links = self.link_generator.generate(self.notes, self.render_mode)

        visible = filter_nodes(nodes, self.filters, notes_by_id, self.clock())
        visible_links = filter_links(links, {node.id for node in visible})

        self.result = self.governor.optimize(visible, visible_links, self.performance_mode)
        ready_ids = {node.id for node in self.result.nodes}
        pinned = {node_id: pos for node_id, pos in overrides.items() if node_id in ready_ids}
        self.simulator.update(self.result.nodes, self.result.links, pinned)
        self.interaction.forget(ready_ids)

        logger.debug(
            f"Recomputed {self.render_mode.value}: {len(nodes)} nodes, {len(links)} links -> "
            f"{len(self.result.nodes)} nodes, {len(self.result.links)} links ({self.result.level.value})"
        )
        return self.result

    # ------------------------------------------------------------------
    # Pointer / viewport
    # ------------------------------------------------------------------

    @property
    def on_select(self) -> SelectCallback | None:
        return self.interaction.on_select

    @on_select.setter
    def on_select(self, callback: SelectCallback | None) -> None:
        self.interaction.on_select = callback

    @property
    def on_hover(self) -> HoverCallback | None:
        return self.interaction.on_hover

    @on_hover.setter
    def on_hover(self, callback: HoverCallback | None) -> None:
        self.interaction.on_hover = callback

    @property
    def selected_id(self) -> str | None:
        return self.interaction.selected_id

    @property
    def hovered_id(self) -> str | None:
        return self.interaction.hovered_id

    def queue_pointer(self, kind: PointerKind | str, x: float, y: float) -> None:
        """Buffer pointer input until the next frame."""
        self._pointer.push(PointerEvent(PointerKind(kind), float(x), float(y)))

    def wheel(self, delta_y: float, anchor: tuple[float, float] | None = None) -> float:
        return self.interaction.wheel(delta_y, anchor)

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def start_simulation(self) -> None:
        self.simulator.start()

    def stop_simulation(self) -> None:
        self.simulator.stop()

    @property
    def is_idle(self) -> bool:
        return self.simulator.is_idle and len(self._pointer) == 0

    def positioned_nodes(self) -> list[GraphNode]:
        """Render-ready nodes at their current simulated positions."""
        return self.simulator.apply_to(self.result.nodes)

    def render_ready(self) -> GraphData:
        return GraphData(nodes=self.positioned_nodes(), links=list(self.result.links))

    def step(self) -> bool:
        """Apply queued input and advance one tick without rendering.

        Returns True when the simulator moved.
        """
        events = self._pointer.drain()
        if events:
            nodes = self.positioned_nodes()
            for event in events:
                self.interaction.handle(event, nodes)
                if event.kind != PointerKind.MOVE:
                    nodes = self.positioned_nodes()
        return self.simulator.tick()

    def frame(self) -> str | None:
        """Apply queued input, advance one tick and render.

        Returns the rendered document, or None while rendering is unavailable.
        """
        self.step()
        return self.render()

    def render(self) -> str | None:
        start = time.perf_counter()
        output = self.boundary.render(self._scene())
        self.last_render_ms = (time.perf_counter() - start) * 1000
        return output

    def retry_render(self) -> str | None:
        """Re-run the pipeline, then render again through the boundary."""
        self.boundary.error = None
        self.recompute()
        if self.boundary.unavailable:
            return None
        return self.boundary.retry(self._scene())

    def run_until_idle(self, max_ticks: int = 1000) -> int:
        """Tick without rendering until the layout settles; returns ticks performed."""
        return self.simulator.run(max_ticks)

    def _scene(self) -> Scene:
        return Scene(
            nodes=self.positioned_nodes(),
            links=self.result.links,
            viewport=self.viewport,
            render_mode=self.render_mode,
            selected_id=self.interaction.selected_id,
            hovered_id=self.interaction.hovered_id,
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def stats(self) -> GraphStats:
        return compute_stats(self.result.nodes, self.result.links)

    def performance(self) -> PerformanceReport:
        return performance_report(self.result, self.last_render_ms)
