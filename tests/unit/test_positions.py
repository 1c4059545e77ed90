"""Unit tests for the position override store."""

import math

from notegraph.graph.positions import PositionStore


class TestPositionStore:
    """Tests for PositionStore."""

    def test_set_and_get(self) -> None:
        store = PositionStore()
        store.set("a", (10, 20.5))
        assert store.get("a") == (10.0, 20.5)
        assert "a" in store
        assert len(store) == 1

    def test_missing_is_none(self) -> None:
        assert PositionStore().get("ghost") is None

    def test_overwrite(self) -> None:
        store = PositionStore()
        store.set("a", (1, 1))
        store.set("a", (2, 3))
        assert store.get("a") == (2.0, 3.0)

    def test_non_finite_positions_ignored(self) -> None:
        """Test NaN or infinite coordinates never enter the store."""
        store = PositionStore()
        store.set("a", (math.nan, 0))
        store.set("b", (0, math.inf))
        assert len(store) == 0

    def test_remove_and_clear(self) -> None:
        store = PositionStore()
        store.set("a", (1, 1))
        store.set("b", (2, 2))
        store.remove("a")
        store.remove("missing")
        assert store.as_dict() == {"b": (2.0, 2.0)}
        store.clear()
        assert store.as_dict() == {}

    def test_as_dict_is_a_snapshot(self) -> None:
        store = PositionStore()
        store.set("a", (1, 1))
        snapshot = store.as_dict()
        snapshot["b"] = (0.0, 0.0)
        assert "b" not in store
