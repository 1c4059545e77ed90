"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from notegraph.config import Settings, get_test_settings
from notegraph.engine import GraphEngine
from notegraph.layout import ForceConfig, LayoutSimulator
from notegraph.models import Note
from notegraph.storage import InMemoryNoteStore, InMemoryPreferenceStore

# Fixed clock for date filters
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with defaults."""
    return get_test_settings()


@pytest.fixture
def make_note() -> Callable[..., Note]:
    """Factory for notes; the title defaults to the upper-cased id."""

    def _make(
        note_id: str,
        title: str | None = None,
        body: str = "",
        tags: tuple[str, ...] = (),
        age: timedelta = timedelta(0),
    ) -> Note:
        return Note(
            id=note_id,
            title=title if title is not None else note_id.upper(),
            body=body,
            tags=tags,
            created_at=NOW - age,
            updated_at=NOW - age,
        )

    return _make


@pytest.fixture
def linked_notes(make_note) -> list[Note]:
    """A -> [[B]], B -> [[A]] and [[C]], C with no references."""
    return [
        make_note("a", "A", body="See [[B]] for details."),
        make_note("b", "B", body="Back to [[A]], and on to [[C]]."),
        make_note("c", "C", body="A leaf note."),
    ]


@pytest.fixture
def sample_notes(make_note) -> list[Note]:
    """Mixed notes covering tags, references, ages and body lengths."""
    return [
        make_note(
            "alpha",
            "Alpha Project",
            body="Kickoff notes. Related: [[Beta Research]]",
            tags=("project", "planning"),
            age=timedelta(hours=2),
        ),
        make_note(
            "beta",
            "Beta Research",
            body="Force directed graph layout research " * 5,
            tags=("research",),
            age=timedelta(days=3),
        ),
        make_note("gamma", "Gamma Ideas", body="Loose ideas.", age=timedelta(days=20)),
        make_note(
            "delta",
            "Delta Archive",
            body="Old material",
            tags=("archive", "project"),
            age=timedelta(days=200),
        ),
        make_note("epsilon", "Epsilon", body="", age=timedelta(days=400)),
    ]


@pytest.fixture
def force_config(test_settings: Settings) -> ForceConfig:
    return ForceConfig.from_settings(test_settings)


@pytest.fixture
def simulator(force_config: ForceConfig) -> LayoutSimulator:
    return LayoutSimulator(force_config)


@pytest.fixture
def preferences() -> InMemoryPreferenceStore:
    return InMemoryPreferenceStore()


@pytest.fixture
def engine(preferences: InMemoryPreferenceStore, force_config: ForceConfig) -> GraphEngine:
    """Engine with in-memory stores and a fixed clock."""
    return GraphEngine(
        note_store=InMemoryNoteStore(),
        preferences=preferences,
        simulator=LayoutSimulator(force_config),
        clock=lambda: NOW,
    )
