"""Session-scoped manual position overrides."""

import logging
import math

logger = logging.getLogger(__name__)


class PositionStore:
    """Map of note id -> (x, y) written on drag release.

    Overrides survive recomputes until overwritten or cleared, and are
    never persisted beyond the session.
    """

    def __init__(self) -> None:
        self._positions: dict[str, tuple[float, float]] = {}

    def get(self, note_id: str) -> tuple[float, float] | None:
        return self._positions.get(note_id)

    def set(self, note_id: str, position: tuple[float, float]) -> None:
        x, y = float(position[0]), float(position[1])
        if not (math.isfinite(x) and math.isfinite(y)):
            logger.warning(f"Ignoring non-finite position for {note_id}: ({x}, {y})")
            return
        self._positions[note_id] = (x, y)

    def remove(self, note_id: str) -> None:
        self._positions.pop(note_id, None)

    def clear(self) -> None:
        self._positions.clear()

    def as_dict(self) -> dict[str, tuple[float, float]]:
        """Snapshot of all overrides."""
        return dict(self._positions)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)
