"""Force-directed layout simulation.

Four forces are evaluated once per tick:
1. Link attraction: spring toward distance / strength
2. Charge repulsion: size-weighted, cut off at a maximum distance
3. Centering: weak pull toward the graph origin
4. Collision: keeps circles apart by their radii plus a margin

Integration follows the usual cooling scheme: `alpha` decays toward
`alpha_target` every tick and the simulation idles once it drops below
`alpha_min`. Velocities are damped every tick. Pinned nodes keep the
position they were given and take no part in integration.
"""

import logging
from collections.abc import Mapping, Sequence

import numpy as np

from notegraph.errors import UnknownNodeError
from notegraph.layout.config import ForceConfig
from notegraph.layout.state import NodeState, Pinned, Simulated
from notegraph.models import GraphLink, GraphNode

logger = logging.getLogger(__name__)

# Charge falls off with 1/d^2; below this squared distance it is capped
_MIN_DISTANCE_SQ = 1.0
# Minimum strength used for the spring rest length
_MIN_LINK_STRENGTH = 0.05


class LayoutSimulator:
    """
    Maintains node positions and relaxes them one tick at a time.

    The simulator holds its own arrays; callers hand it node and link
    lists through `update` and read positions back with `positions` or
    `apply_to`.
    """

    def __init__(self, config: ForceConfig | None = None) -> None:
        self.config = config or ForceConfig.from_settings()
        self._rng = np.random.default_rng(self.config.seed)

        self._ids: list[str] = []
        self._index: dict[str, int] = {}
        self._pos = np.zeros((0, 2))
        self._vel = np.zeros((0, 2))
        self._radius = np.zeros(0)
        self._charge = np.zeros(0)
        self._pinned = np.zeros(0, dtype=bool)

        self._link_src = np.zeros(0, dtype=int)
        self._link_tgt = np.zeros(0, dtype=int)
        self._link_strength = np.zeros(0)

        # Nodes pinned by stored overrides, and nodes under an active drag
        self._fixed: set[str] = set()
        self._dragging: set[str] = set()

        self.alpha = 0.0
        self.alpha_target = 0.0
        self.running = True
        self.tick_count = 0

    # ------------------------------------------------------------------
    # Graph updates
    # ------------------------------------------------------------------

    def update(
        self,
        nodes: Sequence[GraphNode],
        links: Sequence[GraphLink],
        pinned: Mapping[str, tuple[float, float]] | None = None,
    ) -> None:
        """Replace the node and link sets and re-heat.

        Surviving nodes keep their current position and velocity; new nodes
        start where the node says. Ids in `pinned` are fixed at that point.
        """
        pinned = pinned or {}
        was_empty = not self._ids
        count = len(nodes)

        pos = np.zeros((count, 2))
        vel = np.zeros((count, 2))
        sizes = np.zeros(count)
        ids: list[str] = []
        for i, node in enumerate(nodes):
            ids.append(node.id)
            sizes[i] = node.size
            old = self._index.get(node.id)
            if node.id in pinned and node.id not in self._dragging:
                pos[i] = pinned[node.id]
            elif old is not None:
                pos[i] = self._pos[old]
                vel[i] = self._vel[old]
            else:
                pos[i] = (node.x, node.y)

        self._ids = ids
        self._index = {node_id: i for i, node_id in enumerate(ids)}
        self._pos = pos
        self._vel = vel
        self._radius = sizes + self.config.collision_margin / 2.0
        self._charge = self.config.charge_strength * sizes / 30.0

        self._fixed = {node_id for node_id in pinned if node_id in self._index}
        # A drag in progress keeps the pointer position across recomputes
        self._dragging &= set(self._index)
        if not self._dragging:
            self.alpha_target = 0.0
        self._pinned = np.array(
            [node_id in self._fixed or node_id in self._dragging for node_id in ids],
            dtype=bool,
        )
        self._separate_coincident()

        src, tgt, strength = [], [], []
        for link in links:
            s = self._index.get(link.source)
            t = self._index.get(link.target)
            if s is None or t is None or s == t:
                continue
            src.append(s)
            tgt.append(t)
            strength.append(link.strength)
        self._link_src = np.array(src, dtype=int)
        self._link_tgt = np.array(tgt, dtype=int)
        self._link_strength = np.array(strength, dtype=float)

        if count == 0:
            self.alpha = 0.0
        elif was_empty:
            self.alpha = 1.0
        else:
            self.reheat()

        logger.debug(
            f"Simulator updated: {count} nodes, {len(src)} links, "
            f"{int(self._pinned.sum())} pinned, alpha={self.alpha:.3f}"
        )

    def reheat(self, alpha: float | None = None) -> None:
        """Raise the energy so the layout partially resettles."""
        target = self.config.reheat_alpha if alpha is None else alpha
        self.alpha = max(self.alpha, target)

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def node_count(self) -> int:
        return len(self._ids)

    @property
    def is_idle(self) -> bool:
        """True when ticking would not move anything."""
        if not self.running or not self._ids:
            return True
        return self.alpha < self.config.alpha_min and self.alpha_target < self.config.alpha_min

    def position(self, node_id: str) -> tuple[float, float]:
        i = self._require(node_id)
        return float(self._pos[i, 0]), float(self._pos[i, 1])

    def positions(self) -> dict[str, tuple[float, float]]:
        return {
            node_id: (float(self._pos[i, 0]), float(self._pos[i, 1]))
            for i, node_id in enumerate(self._ids)
        }

    def state(self, node_id: str) -> NodeState:
        """Tagged state of a node: Pinned or Simulated."""
        x, y = self.position(node_id)
        if node_id in self._dragging:
            return Pinned(x, y, dragging=True)
        if node_id in self._fixed:
            return Pinned(x, y)
        return Simulated(x, y)

    def apply_to(self, nodes: Sequence[GraphNode]) -> list[GraphNode]:
        """Copy current positions onto `nodes`; unknown nodes are returned unchanged."""
        placed: list[GraphNode] = []
        for node in nodes:
            i = self._index.get(node.id)
            if i is None:
                placed.append(node)
            else:
                placed.append(node.moved_to(self._pos[i, 0], self._pos[i, 1]))
        return placed

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def drag_start(self, node_id: str) -> None:
        """Pin a node to pointer input until `drag_end`."""
        i = self._require(node_id)
        self._dragging.add(node_id)
        self._pinned[i] = True
        self._vel[i] = 0.0
        self.alpha_target = self.config.drag_alpha_target
        logger.debug(f"Drag start: {node_id}")

    def drag_move(self, node_id: str, x: float, y: float) -> None:
        """Place a dragged node directly at (x, y) in graph space."""
        i = self._require(node_id)
        if node_id not in self._dragging:
            logger.debug(f"Ignoring move for {node_id}: not being dragged")
            return
        self._pos[i] = (x, y)
        self._vel[i] = 0.0

    def drag_end(self, node_id: str, pin: bool = False) -> tuple[float, float]:
        """Release a dragged node and return where it was dropped.

        With `pin`, or when an override already fixes the node, it stays
        pinned at the drop point; otherwise it goes back to the simulation.
        """
        i = self._require(node_id)
        self._dragging.discard(node_id)
        if pin:
            self._fixed.add(node_id)
        self._pinned[i] = node_id in self._fixed
        if not self._dragging:
            self.alpha_target = 0.0
        logger.debug(f"Drag end: {node_id}")
        return self.position(node_id)

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Advance one step. Returns False when idle and nothing moved."""
        if self.is_idle:
            return False

        cfg = self.config
        self.alpha += (self.alpha_target - self.alpha) * cfg.alpha_decay

        self._apply_link_force()
        self._apply_charge_force()
        self._apply_center_force()
        self._apply_collision_force()

        free = ~self._pinned
        self._vel *= 1.0 - cfg.velocity_decay
        self._pos[free] += self._vel[free]
        self._vel[self._pinned] = 0.0

        self.tick_count += 1
        return True

    def run(self, max_ticks: int = 300) -> int:
        """Tick until idle or `max_ticks`; returns ticks performed."""
        ticks = 0
        while ticks < max_ticks and self.tick():
            ticks += 1
        return ticks

    def _apply_link_force(self) -> None:
        if self._link_src.size == 0:
            return
        cfg = self.config
        src, tgt = self._link_src, self._link_tgt
        strength = self._link_strength

        degree = np.bincount(np.concatenate([src, tgt]), minlength=len(self._ids)).astype(float)
        bias = degree[src] / (degree[src] + degree[tgt])

        delta = (self._pos[tgt] + self._vel[tgt]) - (self._pos[src] + self._vel[src])
        dist = np.hypot(delta[:, 0], delta[:, 1])
        dist = np.where(dist == 0.0, 1e-6, dist)

        rest = cfg.link_distance / np.maximum(strength, _MIN_LINK_STRENGTH)
        k = (dist - rest) / dist * self.alpha * (cfg.link_stiffness * strength)
        delta *= k[:, None]

        np.add.at(self._vel, tgt, -delta * bias[:, None])
        np.add.at(self._vel, src, delta * (1.0 - bias)[:, None])

    def _apply_charge_force(self) -> None:
        count = len(self._ids)
        if count < 2:
            return
        cfg = self.config
        diff = self._pos[None, :, :] - self._pos[:, None, :]  # x_j - x_i
        dist_sq = np.einsum("ijk,ijk->ij", diff, diff)

        in_range = dist_sq < cfg.charge_distance_max ** 2
        np.fill_diagonal(in_range, False)
        dist_sq = np.maximum(dist_sq, _MIN_DISTANCE_SQ)

        weight = np.where(in_range, self._charge[None, :] * self.alpha / dist_sq, 0.0)
        self._vel += np.einsum("ijk,ij->ik", diff, weight)

    def _apply_center_force(self) -> None:
        self._vel -= self._pos * (self.config.center_strength * self.alpha)

    def _apply_collision_force(self) -> None:
        count = len(self._ids)
        if count < 2:
            return
        cfg = self.config
        predicted = self._pos + self._vel
        diff = predicted[:, None, :] - predicted[None, :, :]  # x_i - x_j
        dist_sq = np.einsum("ijk,ijk->ij", diff, diff)

        reach = self._radius[:, None] + self._radius[None, :]
        overlap = dist_sq < reach ** 2
        np.fill_diagonal(overlap, False)
        if not overlap.any():
            return

        dist = np.sqrt(np.where(overlap, np.maximum(dist_sq, 1e-12), 1.0))
        push = np.where(overlap, (reach - dist) / dist * cfg.collision_strength, 0.0)

        r_sq = self._radius ** 2
        share = r_sq[None, :] / (r_sq[:, None] + r_sq[None, :])  # heavier partner moves less
        self._vel += np.einsum("ijk,ij->ik", diff, push * share)

    def _separate_coincident(self) -> None:
        """Nudge free nodes that share a position so forces can act on them."""
        if len(self._ids) < 2:
            return
        _, first, counts = np.unique(self._pos, axis=0, return_index=True, return_counts=True)
        if (counts == 1).all():
            return
        keep = np.zeros(len(self._ids), dtype=bool)
        keep[first] = True
        movable = ~keep & ~self._pinned
        self._pos[movable] += self._rng.uniform(-1.0, 1.0, size=(int(movable.sum()), 2))

    def _require(self, node_id: str) -> int:
        i = self._index.get(node_id)
        if i is None:
            raise UnknownNodeError(node_id)
        return i
