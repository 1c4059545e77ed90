"""Per-node layout state: driven by the simulation or pinned by input."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Simulated:
    """Position owned by the force simulation."""

    x: float
    y: float


@dataclass(frozen=True)
class Pinned:
    """Position fixed by the user, either mid-drag or via a stored override."""

    x: float
    y: float
    dragging: bool = False


NodeState = Simulated | Pinned
