"""Unit tests for the force-directed layout simulator."""

import math

import numpy as np
import pytest

from notegraph.errors import UnknownNodeError
from notegraph.layout import ForceConfig, LayoutSimulator, Pinned, Simulated
from notegraph.models import GraphLink, GraphNode, LinkType


def ring(count: int, radius: float = 200.0, size: float = 30.0) -> list[GraphNode]:
    nodes = []
    for i in range(count):
        angle = 2 * math.pi * i / count
        nodes.append(
            GraphNode(
                id=f"n{i}",
                title=f"Node {i}",
                x=math.cos(angle) * radius,
                y=math.sin(angle) * radius,
                size=size,
            )
        )
    return nodes


def chain(nodes: list[GraphNode]) -> list[GraphLink]:
    return [
        GraphLink(a.id, b.id, LinkType.INTERNAL, 1.0) for a, b in zip(nodes, nodes[1:])
    ]


class TestEmptyGraph:
    """Tests for the empty graph edge case."""

    def test_empty_is_idle(self, simulator: LayoutSimulator) -> None:
        """Test zero nodes never raises and never ticks."""
        simulator.update([], [])
        assert simulator.is_idle
        assert simulator.tick() is False
        assert simulator.positions() == {}
        assert simulator.alpha == 0.0

    def test_fresh_simulator_is_idle(self, simulator: LayoutSimulator) -> None:
        assert simulator.is_idle
        assert simulator.run() == 0


class TestIntegration:
    """Tests for ticking and cooling."""

    def test_first_update_starts_hot(self, simulator: LayoutSimulator) -> None:
        simulator.update(ring(3), [])
        assert simulator.alpha == 1.0
        assert not simulator.is_idle

    def test_alpha_decays_each_tick(self, simulator: LayoutSimulator) -> None:
        simulator.update(ring(3), [])
        assert simulator.tick() is True
        assert simulator.alpha == pytest.approx(0.98)
        assert simulator.tick_count == 1

    def test_runs_until_idle(self, simulator: LayoutSimulator) -> None:
        """Test the layout settles well before the tick limit."""
        nodes = ring(6)
        simulator.update(nodes, chain(nodes))
        ticks = simulator.run(max_ticks=1000)
        assert 0 < ticks < 1000
        assert simulator.is_idle
        assert simulator.tick() is False

    def test_positions_stay_finite(self, simulator: LayoutSimulator) -> None:
        nodes = ring(30)
        simulator.update(nodes, chain(nodes))
        simulator.run(max_ticks=200)
        coords = np.array(list(simulator.positions().values()))
        assert np.isfinite(coords).all()

    def test_update_reheats_and_keeps_positions(self, simulator: LayoutSimulator) -> None:
        """Test surviving nodes keep their place and alpha rises to the reheat level."""
        nodes = ring(4)
        simulator.update(nodes, [])
        simulator.run(max_ticks=1000)
        settled = simulator.positions()

        extra = GraphNode(id="new", title="New", x=500.0, y=500.0, size=30.0)
        simulator.update(nodes + [extra], [])

        assert simulator.alpha == pytest.approx(0.3)
        for node in nodes:
            assert simulator.position(node.id) == settled[node.id]
        assert simulator.position("new") == (500.0, 500.0)

    def test_removed_nodes_are_forgotten(self, simulator: LayoutSimulator) -> None:
        nodes = ring(4)
        simulator.update(nodes, [])
        simulator.update(nodes[:2], [])
        assert set(simulator.positions()) == {"n0", "n1"}
        with pytest.raises(UnknownNodeError):
            simulator.position("n3")

    def test_links_to_missing_nodes_ignored(self, simulator: LayoutSimulator) -> None:
        nodes = ring(2)
        simulator.update(nodes, [GraphLink("n0", "ghost", LinkType.TAG, 1.0)])
        assert simulator.tick() is True

    def test_overlapping_nodes_separate(self, simulator: LayoutSimulator) -> None:
        """Test two nodes dropped on the same spot are pushed apart."""
        nodes = [
            GraphNode(id="a", title="A", x=0.0, y=0.0, size=20.0),
            GraphNode(id="b", title="B", x=0.0, y=0.0, size=20.0),
        ]
        simulator.update(nodes, [])
        simulator.run(max_ticks=300)
        (ax, ay), (bx, by) = simulator.position("a"), simulator.position("b")
        assert math.hypot(ax - bx, ay - by) > 20.0

    def test_link_rest_length_scales_with_strength(self) -> None:
        """Test a lone link settles near link_distance / strength."""
        config = ForceConfig(charge_strength=0.0, center_strength=0.0, collision_strength=0.0)
        nodes = [
            GraphNode(id="a", title="A", x=-150.0, y=0.0, size=20.0),
            GraphNode(id="b", title="B", x=150.0, y=0.0, size=20.0),
        ]
        for strength, rest in ((1.0, 100.0), (0.5, 200.0)):
            sim = LayoutSimulator(config)
            sim.update(nodes, [GraphLink("a", "b", LinkType.INTERNAL, strength)])
            sim.run(max_ticks=1000)
            (ax, ay), (bx, by) = sim.position("a"), sim.position("b")
            assert math.hypot(ax - bx, ay - by) == pytest.approx(rest, abs=10.0)

    def test_deterministic(self, force_config: ForceConfig) -> None:
        """Test identical inputs and seed give identical layouts."""
        nodes = ring(8)
        first, second = LayoutSimulator(force_config), LayoutSimulator(force_config)
        for sim in (first, second):
            sim.update(nodes, chain(nodes))
            sim.run(max_ticks=50)
        assert first.positions() == second.positions()

    def test_stop_and_start(self, simulator: LayoutSimulator) -> None:
        simulator.update(ring(3), [])
        simulator.stop()
        assert simulator.tick() is False
        simulator.start()
        assert simulator.tick() is True

    def test_apply_to(self, simulator: LayoutSimulator) -> None:
        nodes = ring(3)
        simulator.update(nodes, [])
        simulator.run(max_ticks=10)
        placed = simulator.apply_to(nodes + [GraphNode(id="other", title="Other")])
        assert (placed[0].x, placed[0].y) == simulator.position("n0")
        assert placed[-1].id == "other"


class TestPinning:
    """Tests for drag pinning and position overrides."""

    def test_drag_pins_node(self, simulator: LayoutSimulator) -> None:
        """Test a dragged node follows the pointer and ignores forces."""
        nodes = ring(4)
        simulator.update(nodes, chain(nodes))
        simulator.drag_start("n0")
        simulator.drag_move("n0", 50.0, 60.0)
        for _ in range(20):
            simulator.tick()

        assert simulator.position("n0") == (50.0, 60.0)
        assert simulator.state("n0") == Pinned(50.0, 60.0, dragging=True)
        assert isinstance(simulator.state("n1"), Simulated)

    def test_drag_keeps_simulation_warm(self, simulator: LayoutSimulator) -> None:
        nodes = ring(3)
        simulator.update(nodes, [])
        simulator.run(max_ticks=1000)
        simulator.drag_start("n1")
        assert not simulator.is_idle
        assert simulator.alpha_target == pytest.approx(0.3)

    def test_drag_end_releases(self, simulator: LayoutSimulator) -> None:
        nodes = ring(3)
        simulator.update(nodes, [])
        simulator.drag_start("n0")
        simulator.drag_move("n0", 10.0, 10.0)
        assert simulator.drag_end("n0") == (10.0, 10.0)
        assert simulator.state("n0") == Simulated(10.0, 10.0)
        assert simulator.alpha_target == 0.0

    def test_drag_end_with_pin_keeps_node_fixed(self, simulator: LayoutSimulator) -> None:
        """Test a pinned drop stays put while the rest of the graph moves."""
        nodes = ring(4)
        simulator.update(nodes, chain(nodes))
        simulator.drag_start("n0")
        simulator.drag_move("n0", 300.0, 150.0)
        assert simulator.drag_end("n0", pin=True) == (300.0, 150.0)

        simulator.reheat(1.0)
        simulator.run(max_ticks=200)
        assert simulator.position("n0") == (300.0, 150.0)
        assert simulator.state("n0") == Pinned(300.0, 150.0)

    def test_drag_unknown_node_raises(self, simulator: LayoutSimulator) -> None:
        simulator.update(ring(2), [])
        with pytest.raises(UnknownNodeError):
            simulator.drag_start("ghost")

    def test_move_without_drag_is_ignored(self, simulator: LayoutSimulator) -> None:
        nodes = ring(2)
        simulator.update(nodes, [])
        before = simulator.position("n0")
        simulator.drag_move("n0", 99.0, 99.0)
        assert simulator.position("n0") == before

    def test_override_pins_on_update(self, simulator: LayoutSimulator) -> None:
        """Test a position override fixes the node in place."""
        nodes = ring(4)
        simulator.update(nodes, chain(nodes), pinned={"n2": (10.0, 20.0)})
        simulator.run(max_ticks=100)
        assert simulator.position("n2") == (10.0, 20.0)
        assert simulator.state("n2") == Pinned(10.0, 20.0)

    def test_overridden_node_stays_pinned_after_drag(self, simulator: LayoutSimulator) -> None:
        nodes = ring(3)
        simulator.update(nodes, [], pinned={"n0": (0.0, 0.0)})
        simulator.drag_start("n0")
        simulator.drag_move("n0", 5.0, 5.0)
        simulator.drag_end("n0")
        simulator.tick()
        assert simulator.state("n0") == Pinned(5.0, 5.0)

    def test_drag_survives_update(self, simulator: LayoutSimulator) -> None:
        nodes = ring(3)
        simulator.update(nodes, [])
        simulator.drag_start("n0")
        simulator.drag_move("n0", 42.0, 7.0)
        simulator.update(nodes, [])
        assert simulator.state("n0") == Pinned(42.0, 7.0, dragging=True)
