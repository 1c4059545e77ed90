"""Graph statistics and performance reporting."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from notegraph.models import GraphLink, GraphNode, OptimizationLevel

if TYPE_CHECKING:
    from notegraph.graph.optimization import OptimizationResult

# Frame budget at ~60 Hz
FRAME_BUDGET_MS = 16.0


@dataclass
class GraphStats:
    """Structural metrics for the render-ready graph."""

    node_count: int = 0
    link_count: int = 0
    average_connections: float = 0.0
    most_connected_id: str | None = None
    most_connected_title: str | None = None
    most_connected_degree: int = 0
    orphan_count: int = 0  # Nodes with no links
    links_by_type: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "node_count": self.node_count,
            "link_count": self.link_count,
            "average_connections": self.average_connections,
            "most_connected": {
                "id": self.most_connected_id,
                "title": self.most_connected_title,
                "degree": self.most_connected_degree,
            },
            "orphan_count": self.orphan_count,
            "links_by_type": dict(self.links_by_type),
        }


@dataclass
class PerformanceReport:
    """Score, status and advice derived from an optimization pass."""

    score: float
    status: str
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "status": self.status,
            "recommendations": list(self.recommendations),
        }


def compute_stats(nodes: Sequence[GraphNode], links: Sequence[GraphLink]) -> GraphStats:
    """Compute counts, degree leader and orphans.

    Ties for most connected go to the node earliest in `nodes`.
    """
    stats = GraphStats(node_count=len(nodes), link_count=len(links))
    if not nodes:
        return stats

    degree: Counter[str] = Counter()
    for link in links:
        degree[link.source] += 1
        degree[link.target] += 1

    stats.average_connections = (2 * len(links)) / len(nodes)
    stats.orphan_count = sum(1 for n in nodes if degree[n.id] == 0)
    stats.links_by_type = dict(Counter(link.type.value for link in links))

    leader: GraphNode | None = None
    for node in nodes:
        if degree[node.id] > stats.most_connected_degree:
            leader = node
            stats.most_connected_degree = degree[node.id]
    if leader is not None:
        stats.most_connected_id = leader.id
        stats.most_connected_title = leader.title

    return stats


def performance_report(result: OptimizationResult, render_time_ms: float | None = None) -> PerformanceReport:
    """Score the current optimization pass (0-100).

    Slow frames are penalised, culling is rewarded.
    """
    elapsed = result.calculation_time_ms if render_time_ms is None else render_time_ms
    score = 100 - (elapsed / FRAME_BUDGET_MS) * 50 + result.culling_efficiency * 30
    score = max(0.0, min(100.0, score))

    if score >= 80:
        status = "Excellent"
    elif score >= 60:
        status = "Good"
    elif score >= 40:
        status = "Fair"
    else:
        status = "Poor"

    recommendations: list[str] = []
    if elapsed > FRAME_BUDGET_MS:
        recommendations.append("Frame budget exceeded - switch to performance mode")
    if result.total_nodes > 200 and result.level != OptimizationLevel.HIGH:
        recommendations.append("Large graph detected - use performance mode")
    if result.level == OptimizationLevel.NONE and result.total_nodes > 100:
        recommendations.append("Lower the quality threshold to thin out links on larger graphs")

    return PerformanceReport(score=score, status=status, recommendations=recommendations)
