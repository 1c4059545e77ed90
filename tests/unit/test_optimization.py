"""Unit tests for the optimization governor."""

import pytest

from notegraph.graph.optimization import OptimizationGovernor, optimize_graph
from notegraph.models import GraphLink, GraphNode, LinkType, OptimizationLevel, PerformanceMode


def make_graph(node_count: int, link_count: int | None = None) -> tuple[list[GraphNode], list[GraphLink]]:
    """Chain graph: n0 - n1 - n2 - ..."""
    nodes = [GraphNode(id=f"n{i}", title=f"Node {i}") for i in range(node_count)]
    chain = node_count - 1 if link_count is None else link_count
    links = [GraphLink(f"n{i}", f"n{i + 1}", LinkType.INTERNAL, 1.0) for i in range(chain)]
    return nodes, links


@pytest.fixture
def governor() -> OptimizationGovernor:
    return OptimizationGovernor(quality_threshold=100, performance_threshold=500, medium_link_drop_fraction=0.3)


class TestSelectLevel:
    """Tests for level selection."""

    @pytest.mark.parametrize(
        "count,mode,level",
        [
            (50, "auto", OptimizationLevel.NONE),
            (100, "auto", OptimizationLevel.NONE),
            (101, "auto", OptimizationLevel.MEDIUM),
            (501, "auto", OptimizationLevel.HIGH),
            (150, "quality", OptimizationLevel.MEDIUM),
            (100, "quality", OptimizationLevel.NONE),
            (501, "quality", OptimizationLevel.HIGH),
            (10, "performance", OptimizationLevel.HIGH),
        ],
    )
    def test_levels(self, governor, count: int, mode: str, level: OptimizationLevel) -> None:
        assert governor.select_level(count, mode) == level

    def test_unknown_mode_is_auto(self, governor) -> None:
        assert governor.select_level(150, "turbo") == OptimizationLevel.MEDIUM

    def test_zero_quality_threshold_is_kept(self) -> None:
        governor = OptimizationGovernor(quality_threshold=0)
        assert governor.quality_threshold == 0
        assert governor.select_level(1, "auto") == OptimizationLevel.MEDIUM


class TestOptimize:
    """Tests for optimize()."""

    def test_performance_mode_caps_nodes(self, governor) -> None:
        """Test 600 nodes in performance mode yields 500 with no dangling links."""
        nodes, links = make_graph(600)
        result = governor.optimize(nodes, links, PerformanceMode.PERFORMANCE)

        assert result.level == OptimizationLevel.HIGH
        assert len(result.nodes) == 500
        assert [n.id for n in result.nodes] == [f"n{i}" for i in range(500)]
        kept = {n.id for n in result.nodes}
        assert all(link.source in kept and link.target in kept for link in result.links)
        assert len(result.links) == 499
        assert result.culling_efficiency == pytest.approx(100 / 600)

    def test_medium_keeps_leading_links(self, governor) -> None:
        """Test the medium level keeps the first 70% of links."""
        nodes, links = make_graph(150, link_count=15)
        result = governor.optimize(nodes, links, PerformanceMode.AUTO)

        assert result.level == OptimizationLevel.MEDIUM
        assert len(result.nodes) == 150
        assert result.links == links[:10]
        assert result.link_reduction == pytest.approx(5 / 15)

    def test_quality_mode_thins_links_above_threshold(self, governor) -> None:
        """Test quality mode uses the medium level above the quality threshold."""
        nodes, links = make_graph(150, link_count=15)
        result = governor.optimize(nodes, links, PerformanceMode.QUALITY)
        assert result.level == OptimizationLevel.MEDIUM
        assert len(result.nodes) == 150
        assert result.links == links[:10]

    def test_quality_mode_keeps_all_links_when_small(self, governor) -> None:
        nodes, links = make_graph(100)
        result = governor.optimize(nodes, links, PerformanceMode.QUALITY)
        assert result.level == OptimizationLevel.NONE
        assert result.links == links

    def test_dangling_links_always_dropped(self, governor) -> None:
        nodes, links = make_graph(3)
        links.append(GraphLink("n0", "ghost", LinkType.TAG, 0.5))
        result = governor.optimize(nodes, links, PerformanceMode.AUTO)
        assert result.level == OptimizationLevel.NONE
        assert len(result.links) == 2

    def test_inputs_not_mutated(self, governor) -> None:
        nodes, links = make_graph(600)
        nodes_before, links_before = list(nodes), list(links)
        governor.optimize(nodes, links, PerformanceMode.PERFORMANCE)
        assert nodes == nodes_before
        assert links == links_before

    def test_empty_graph(self, governor) -> None:
        result = governor.optimize([], [], PerformanceMode.AUTO)
        assert result.nodes == []
        assert result.links == []
        assert result.culling_efficiency == 0.0
        assert result.link_reduction == 0.0

    def test_result_to_dict(self, governor) -> None:
        nodes, links = make_graph(600)
        data = governor.optimize(nodes, links, "performance").to_dict()
        assert data["level"] == "high"
        assert data["mode"] == "performance"
        assert data["total_nodes"] == 600
        assert data["visible_nodes"] == 500
        assert data["calculation_time_ms"] >= 0

    def test_convenience_function_uses_settings(self) -> None:
        nodes, links = make_graph(600)
        result = optimize_graph(nodes, links, "performance")
        assert len(result.nodes) == 500
