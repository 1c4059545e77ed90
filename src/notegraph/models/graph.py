"""Data models for the note graph."""

from dataclasses import dataclass, field, replace
from enum import Enum


class LinkType(str, Enum):
    """Kind of relationship a link represents."""

    INTERNAL = "internal"  # [[Title]] reference
    TAG = "tag"  # Shared tags
    SIMILARITY = "similarity"  # Lexical overlap of bodies
    HIERARCHICAL = "hierarchical"  # {prefix}-{number} sequence


class RenderMode(str, Enum):
    """Active link-generation strategy."""

    INTERNAL = "internal"
    TAG = "tag"
    SIMILARITY = "similarity"
    HIERARCHICAL = "hierarchical"
    HYBRID = "hybrid"  # Internal + tag links

    @classmethod
    def parse(cls, value: "str | RenderMode | None", default: "RenderMode | None" = None) -> "RenderMode":
        """Parse a mode name, falling back to `default` (internal) when unknown."""
        fallback = default or cls.INTERNAL
        if isinstance(value, cls):
            return value
        if not value:
            return fallback
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return fallback


class PerformanceMode(str, Enum):
    """User-selected trade-off between fidelity and frame budget."""

    QUALITY = "quality"
    PERFORMANCE = "performance"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: "str | PerformanceMode | None") -> "PerformanceMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.AUTO


class OptimizationLevel(str, Enum):
    """Degree of node/link truncation applied before layout."""

    NONE = "none"
    MEDIUM = "medium"
    HIGH = "high"


def clamp_strength(value: float) -> float:
    """Clamp a link strength into [0, 1]."""
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class GraphNode:
    """
    Visual representation of one note.

    Selection and hover are overlay state owned by the engine and applied
    at render time, so nodes stay immutable between recomputes.
    """

    id: str
    title: str
    x: float = 0.0
    y: float = 0.0
    size: float = 20.0
    color: str = "#6c757d"
    tags: tuple[str, ...] = ()

    @property
    def radius(self) -> float:
        return self.size

    def moved_to(self, x: float, y: float) -> "GraphNode":
        """Return a copy at a new position."""
        return replace(self, x=float(x), y=float(y))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "x": self.x,
            "y": self.y,
            "size": self.size,
            "color": self.color,
            "tags": list(self.tags),
        }


@dataclass(frozen=True)
class GraphLink:
    """A typed, weighted relationship between two notes.

    Example: "note-a" --internal--> "note-b" (strength: 0.67)
    """

    source: str
    target: str
    type: LinkType
    strength: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "strength", clamp_strength(self.strength))

    @property
    def pair(self) -> frozenset[str]:
        """Unordered endpoint pair."""
        return frozenset((self.source, self.target))

    def touches(self, node_id: str) -> bool:
        return node_id == self.source or node_id == self.target

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.type.value,
            "strength": self.strength,
        }


@dataclass
class GraphData:
    """A node set plus the links between its members."""

    nodes: list[GraphNode] = field(default_factory=list)
    links: list[GraphLink] = field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class RenderModeInfo:
    """Display metadata for a render mode."""

    mode: RenderMode
    name: str
    description: str

    def to_dict(self) -> dict:
        return {"id": self.mode.value, "name": self.name, "description": self.description}


RENDER_MODES: dict[RenderMode, RenderModeInfo] = {
    info.mode: info
    for info in (
        RenderModeInfo(
            RenderMode.INTERNAL,
            "Internal Links",
            "Show explicit connections via [[Note Title]] references",
        ),
        RenderModeInfo(
            RenderMode.TAG,
            "Tag Clusters",
            "Connect notes that share tags to show thematic relationships",
        ),
        RenderModeInfo(
            RenderMode.SIMILARITY,
            "Content Similarity",
            "Connect notes with similar content and keywords",
        ),
        RenderModeInfo(
            RenderMode.HYBRID,
            "Hybrid View",
            "Combine internal links and tag connections for complete picture",
        ),
        RenderModeInfo(
            RenderMode.HIERARCHICAL,
            "Hierarchical",
            "Show parent-child sequences of numbered note ids",
        ),
    )
}
