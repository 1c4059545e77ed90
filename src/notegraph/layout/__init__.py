"""Force-directed layout."""

from notegraph.layout.config import ForceConfig
from notegraph.layout.simulator import LayoutSimulator
from notegraph.layout.state import NodeState, Pinned, Simulated

__all__ = [
    "ForceConfig",
    "LayoutSimulator",
    "NodeState",
    "Pinned",
    "Simulated",
]
