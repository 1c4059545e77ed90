"""Unit tests for API endpoints."""

import pytest
from fastapi.testclient import TestClient

from notegraph.api.graph import NoteIn, ZoomRequest
from notegraph.api.main import create_app
from notegraph.api.routes import HealthResponse
from notegraph.view import SvgSurface

NOTES = [
    {
        "id": "alpha",
        "title": "Alpha",
        "body": "See [[Beta]]",
        "tags": ["project"],
        "createdAt": "2024-06-01T10:00:00Z",
        "updatedAt": "2024-06-02T10:00:00Z",
    },
    {"id": "beta", "title": "Beta", "body": "Back to [[Alpha]] and [[Gamma]]", "tags": ["project"]},
    {"id": "gamma", "title": "Gamma", "body": "", "tags": []},
]


def failing_factory():
    raise RuntimeError("no canvas")


@pytest.fixture
def client():
    with TestClient(create_app(), raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def loaded(client: TestClient) -> TestClient:
    response = client.put("/graph/notes", json={"notes": NOTES})
    assert response.status_code == 200
    return client


class TestModels:
    """Tests for request/response models."""

    def test_note_in_accepts_camel_case(self) -> None:
        note = NoteIn(**NOTES[0]).to_note()
        assert note.id == "alpha"
        assert note.tags == ("project",)
        assert note.created_at.day == 1
        assert note.updated_at.day == 2

    def test_note_in_defaults(self) -> None:
        note = NoteIn(id="x").to_note()
        assert note.title == ""
        assert note.tags == ()

    def test_zoom_anchor(self) -> None:
        assert ZoomRequest(anchor_x=1.0).anchor is None
        assert ZoomRequest(anchor_x=1.0, anchor_y=2.0).anchor == (1.0, 2.0)

    def test_health_response_default_version(self) -> None:
        resp = HealthResponse(status="healthy", notes_count=0, render_available=True)
        assert resp.version == "0.1.0"


class TestServiceEndpoints:
    """Tests for health and render mode listing."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["notes_count"] == 0
        assert data["render_available"] is True

    def test_modes(self, client: TestClient) -> None:
        response = client.get("/graph/modes")
        assert response.status_code == 200
        modes = response.json()
        assert [m["id"] for m in modes] == ["internal", "tag", "similarity", "hybrid", "hierarchical"]
        assert [m["id"] for m in modes if m["active"]] == ["internal"]


class TestNotesAndModes:
    """Tests for loading notes and switching modes."""

    def test_put_notes(self, client: TestClient) -> None:
        response = client.put("/graph/notes", json={"notes": NOTES})
        assert response.json() == {"notes_count": 3, "visible_nodes": 3, "visible_links": 2}

    def test_put_invalid_notes(self, client: TestClient) -> None:
        response = client.put("/graph/notes", json={"notes": [{"title": "no id"}]})
        assert response.status_code == 422

    def test_graph_data(self, loaded: TestClient) -> None:
        data = loaded.get("/graph/data").json()
        assert [n["id"] for n in data["nodes"]] == ["alpha", "beta", "gamma"]
        assert len(data["links"]) == 2
        assert data["render_mode"] == "internal"
        assert data["optimization"]["level"] == "none"

    def test_render_mode(self, loaded: TestClient) -> None:
        response = loaded.post("/graph/render-mode", json={"mode": "tag"})
        assert response.json()["name"] == "Tag Clusters"
        data = loaded.get("/graph/data").json()
        assert [link["type"] for link in data["links"]] == ["tag"]

        modes = loaded.get("/graph/modes").json()
        assert [m["id"] for m in modes if m["active"]] == ["tag"]

    def test_unknown_render_mode_falls_back(self, loaded: TestClient) -> None:
        response = loaded.post("/graph/render-mode", json={"mode": "galaxy"})
        assert response.json()["mode"] == "internal"

    def test_performance_mode(self, loaded: TestClient) -> None:
        response = loaded.post("/graph/performance-mode", json={"mode": "performance"})
        assert response.json() == {"mode": "performance", "level": "high"}

    def test_filters(self, loaded: TestClient) -> None:
        response = loaded.post("/graph/filters", json={"search": "alpha"})
        data = response.json()
        assert data["visible_nodes"] == 1
        assert data["visible_links"] == 0
        assert data["filters"]["search"] == "alpha"

    def test_unknown_filter_value_means_all(self, loaded: TestClient) -> None:
        response = loaded.post("/graph/filters", json={"date": "last-century"})
        assert response.json()["visible_nodes"] == 3


class TestViewport:
    """Tests for viewport endpoints."""

    def test_zoom_in_clamps(self, client: TestClient) -> None:
        for _ in range(20):
            response = client.post("/graph/viewport/zoom", json={"action": "in"})
        assert response.json()["zoom"] == 3.0

    def test_set_zoom_requires_value(self, client: TestClient) -> None:
        response = client.post("/graph/viewport/zoom", json={"action": "set"})
        assert response.status_code == 422

    def test_set_zoom(self, client: TestClient) -> None:
        response = client.post("/graph/viewport/zoom", json={"action": "set", "zoom": 0.01})
        assert response.json()["zoom"] == 0.1

    def test_pan_and_reset(self, client: TestClient) -> None:
        response = client.post("/graph/viewport/pan", json={"dx": 15, "dy": -5})
        assert (response.json()["pan_x"], response.json()["pan_y"]) == (15.0, -5.0)

        response = client.post("/graph/viewport/reset")
        assert response.json()["zoom"] == 1.0
        assert response.json()["pan_x"] == 0.0


class TestFrames:
    """Tests for ticking and pointer input."""

    def test_tick(self, loaded: TestClient) -> None:
        data = loaded.post("/graph/tick", json={"frames": 5}).json()
        assert data["ticks"] == 5
        assert data["running"] is True
        assert data["idle"] is False

    def test_tick_paused(self, loaded: TestClient) -> None:
        data = loaded.post("/graph/tick", json={"frames": 5, "running": False}).json()
        assert data["ticks"] == 0
        assert data["running"] is False

    def test_tick_limit(self, client: TestClient) -> None:
        response = client.post("/graph/tick", json={"frames": 5000})
        assert response.status_code == 422

    def test_click_on_empty_canvas(self, loaded: TestClient) -> None:
        loaded.post("/graph/pointer", json={"kind": "down", "x": 5, "y": 5})
        data = loaded.post("/graph/pointer", json={"kind": "up", "x": 5, "y": 5}).json()
        assert data == {"selected_id": None, "hovered_id": None, "dragging_id": None}

    def test_click_on_node_selects(self, loaded: TestClient) -> None:
        # First of three notes starts at graph (200, 0), screen (600, 300)
        loaded.post("/graph/pointer", json={"kind": "down", "x": 600, "y": 300})
        data = loaded.post("/graph/pointer", json={"kind": "up", "x": 600, "y": 300}).json()
        assert data["selected_id"] == "alpha"


class TestRendering:
    """Tests for SVG rendering and the unavailable state."""

    def test_render_svg(self, loaded: TestClient) -> None:
        response = loaded.get("/graph/render.svg")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert response.text.startswith("<svg")

    def test_unavailable_then_retry(self, loaded: TestClient) -> None:
        """Test a failing surface gives 503 until a successful retry."""
        renderer = loaded.app.state.engine.boundary.renderer
        renderer.surface_factory = failing_factory

        response = loaded.get("/graph/render.svg")
        assert response.status_code == 503
        assert "no canvas" in response.json()["detail"]
        assert loaded.get("/health").json()["status"] == "degraded"

        renderer.surface_factory = SvgSurface
        assert loaded.get("/graph/render.svg").status_code == 503

        response = loaded.post("/graph/render/retry")
        assert response.status_code == 200
        assert loaded.get("/health").json()["status"] == "healthy"

    def test_stats(self, loaded: TestClient) -> None:
        data = loaded.get("/graph/stats").json()
        assert set(data) == {"stats", "optimization", "performance", "render_mode", "performance_mode"}
        assert data["stats"]["node_count"] == 3
        assert data["stats"]["most_connected"]["id"] == "beta"
