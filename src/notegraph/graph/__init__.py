"""Graph pipeline stages.

Provides:
- Link generation (internal, tag, similarity, hierarchical, hybrid)
- Node building (size, colour, initial position)
- Filter pipeline
- Optimization governor
- Position overrides
- Graph statistics
"""

from notegraph.graph.filters import (
    ContentFilter,
    DateBucket,
    FilterCriteria,
    SizeBucket,
    filter_links,
    filter_nodes,
)
from notegraph.graph.links import LinkGenerator, generate_links
from notegraph.graph.metrics import GraphStats, PerformanceReport, compute_stats, performance_report
from notegraph.graph.nodes import build_nodes
from notegraph.graph.optimization import OptimizationGovernor, OptimizationResult, optimize_graph
from notegraph.graph.positions import PositionStore

__all__ = [
    # Links
    "LinkGenerator",
    "generate_links",
    # Nodes
    "build_nodes",
    # Filters
    "FilterCriteria",
    "DateBucket",
    "ContentFilter",
    "SizeBucket",
    "filter_nodes",
    "filter_links",
    # Optimization
    "OptimizationGovernor",
    "OptimizationResult",
    "optimize_graph",
    # Positions
    "PositionStore",
    # Metrics
    "GraphStats",
    "PerformanceReport",
    "compute_stats",
    "performance_report",
]
