"""Optimization governor: bound the render-ready graph by node count and mode."""

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass

from notegraph.config import settings
from notegraph.graph.filters import filter_links
from notegraph.models import GraphLink, GraphNode, OptimizationLevel, PerformanceMode

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """Render-ready graph plus what was cut to get there."""

    nodes: list[GraphNode]
    links: list[GraphLink]
    level: OptimizationLevel
    mode: PerformanceMode

    total_nodes: int = 0
    total_links: int = 0
    calculation_time_ms: float = 0.0

    @property
    def culling_efficiency(self) -> float:
        """Fraction of input nodes that were cut (0.0 - 1.0)."""
        if self.total_nodes == 0:
            return 0.0
        return (self.total_nodes - len(self.nodes)) / self.total_nodes

    @property
    def link_reduction(self) -> float:
        if self.total_links == 0:
            return 0.0
        return (self.total_links - len(self.links)) / self.total_links

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "mode": self.mode.value,
            "total_nodes": self.total_nodes,
            "total_links": self.total_links,
            "visible_nodes": len(self.nodes),
            "visible_links": len(self.links),
            "culling_efficiency": self.culling_efficiency,
            "link_reduction": self.link_reduction,
            "calculation_time_ms": self.calculation_time_ms,
        }


class OptimizationGovernor:
    """
    Chooses and applies an optimization level.

    Levels:
    - none: node count at or below the quality threshold
    - medium: above it, drop a trailing fraction of links
    - high: performance mode or above the performance threshold,
      cap nodes by list order and drop links to cut nodes
    """

    def __init__(
        self,
        quality_threshold: int | None = None,
        performance_threshold: int | None = None,
        medium_link_drop_fraction: float | None = None,
    ) -> None:
        self.quality_threshold = (
            quality_threshold if quality_threshold is not None else settings.quality_node_threshold
        )
        self.performance_threshold = (
            performance_threshold
            if performance_threshold is not None
            else settings.performance_node_threshold
        )
        drop = (
            medium_link_drop_fraction
            if medium_link_drop_fraction is not None
            else settings.medium_link_drop_fraction
        )
        self.medium_link_drop_fraction = max(0.0, min(1.0, drop))

    def select_level(self, node_count: int, mode: PerformanceMode | str) -> OptimizationLevel:
        """Pick the level for `node_count` nodes under `mode`."""
        mode = PerformanceMode.parse(mode)
        if mode == PerformanceMode.PERFORMANCE or node_count > self.performance_threshold:
            return OptimizationLevel.HIGH
        if node_count > self.quality_threshold:
            return OptimizationLevel.MEDIUM
        return OptimizationLevel.NONE

    def optimize(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        mode: PerformanceMode | str = PerformanceMode.AUTO,
    ) -> OptimizationResult:
        """Return the render-ready subset. Inputs are never mutated."""
        start = time.perf_counter()
        mode = PerformanceMode.parse(mode)
        level = self.select_level(len(nodes), mode)

        kept_nodes = list(nodes)
        kept_links = list(links)
        if level == OptimizationLevel.HIGH:
            kept_nodes = kept_nodes[: self.performance_threshold]
        elif level == OptimizationLevel.MEDIUM:
            keep = math.floor(len(kept_links) * (1.0 - self.medium_link_drop_fraction))
            kept_links = kept_links[:keep]

        # Dangling links never leave the governor, whatever the level
        kept_links = filter_links(kept_links, {n.id for n in kept_nodes})

        elapsed_ms = (time.perf_counter() - start) * 1000
        if level != OptimizationLevel.NONE:
            logger.info(
                f"Optimization {level.value} ({mode.value}): "
                f"{len(kept_nodes)}/{len(nodes)} nodes, {len(kept_links)}/{len(links)} links"
            )

        return OptimizationResult(
            nodes=kept_nodes,
            links=kept_links,
            level=level,
            mode=mode,
            total_nodes=len(nodes),
            total_links=len(links),
            calculation_time_ms=elapsed_ms,
        )


def optimize_graph(
    nodes: Sequence[GraphNode],
    links: Sequence[GraphLink],
    mode: PerformanceMode | str = PerformanceMode.AUTO,
) -> OptimizationResult:
    """Convenience function using configured thresholds."""
    return OptimizationGovernor().optimize(nodes, links, mode)
