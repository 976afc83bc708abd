from types import SimpleNamespace

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from dispatch.api.routes import health, technicians
from dispatch.db import supabase as supabase_db
from dispatch.dependencies import get_orchestrator
from dispatch.main import create_app
from dispatch.models.domain import UnshapedCandidate
from dispatch.services.routing import directions_client, osrm_client
from dispatch.services.routing.formatting import RoutingError

from doubles import (
    HASSEN,
    RecordingIndex,
    RecordingRegistry,
    StubRoutingService,
    make_orchestrator,
    route_detail,
)


@pytest.fixture
def app():
    return create_app()


def _client(app, orchestrator) -> TestClient:
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    return TestClient(app)


def test_resolve_endpoint_returns_assignment(app):
    orchestrator = make_orchestrator(
        RecordingIndex([HASSEN]),
        RecordingRegistry(),
        StubRoutingService(route_detail("8.2 km", "22 mins", polyline="_p~iF~ps|U_ulLnnqC_mqNvxq`@")),
    )

    response = _client(app, orchestrator).post(
        "/api/technicians/resolve", json={"latitude": 45.5017, "longitude": -73.5673}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["technician"] == {"name": "Hassen", "rating": 4.8}
    assert payload["technician_location"] == {"latitude": 45.52, "longitude": -73.58}
    assert payload["customer_location"] == {"latitude": 45.5017, "longitude": -73.5673}
    assert payload["distance_text"] == "8.2 km"
    assert payload["duration_text"] == "22 mins"
    assert payload["route_available"] is True
    assert len(payload["route_path"]) == 3


def test_nearest_endpoint_with_degraded_route(app):
    orchestrator = make_orchestrator(
        RecordingIndex(error=ConnectionError("rpc down")),
        RecordingRegistry({"Hassen": HASSEN}),
        StubRoutingService(error=RoutingError("denied")),
    )

    response = _client(app, orchestrator).get(
        "/api/technicians/nearest", params={"latitude": 45.5017, "longitude": -73.5673}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["technician"]["name"] == "Hassen"
    assert payload["distance_text"] == "~10 km"
    assert payload["duration_text"] == "~30 min"
    assert payload["route_available"] is False
    assert payload["route_path"] == []


def test_invalid_coordinates_return_400(app):
    index = RecordingIndex([HASSEN])
    client = _client(app, make_orchestrator(index, RecordingRegistry(), StubRoutingService()))

    response = client.get("/api/technicians/nearest", params={"latitude": 123, "longitude": -73.5})

    assert response.status_code == 400
    assert index.calls == []


def test_no_technician_returns_503(app):
    orchestrator = make_orchestrator(
        RecordingIndex(error=ConnectionError("rpc down")),
        RecordingRegistry(error=ConnectionError("table down")),
        StubRoutingService(route_detail()),
    )

    response = _client(app, orchestrator).post(
        "/api/technicians/resolve", json={"latitude": 45.5017, "longitude": -73.5673}
    )

    assert response.status_code == 503
    assert response.json()["detail"]


def test_bad_technician_data_returns_502(app):
    orchestrator = make_orchestrator(
        RecordingIndex([UnshapedCandidate(name="Hassen", rating=4.8)]),
        RecordingRegistry(),
        StubRoutingService(route_detail()),
    )

    response = _client(app, orchestrator).post(
        "/api/technicians/resolve", json={"latitude": 45.5017, "longitude": -73.5673}
    )

    assert response.status_code == 502


def test_ip_resolution_without_location_returns_424(app):
    index = RecordingIndex([HASSEN])
    client = _client(app, make_orchestrator(index, RecordingRegistry(), StubRoutingService()))

    response = client.post("/api/technicians/resolve/ip")

    assert response.status_code == 424
    assert index.calls == []


def test_health_and_root(app):
    client = TestClient(app)

    assert client.get("/api/health").json() == {"status": "ok"}
    root = client.get("/").json()
    assert root["status"] == "running"
    assert root["health"] == "/api/health"


def test_client_address_ignores_forwarded_header():
    request = Request(
        {
            "type": "http",
            "headers": [(b"x-forwarded-for", b"8.8.8.8")],
            "client": ("203.0.113.7", 51234),
        }
    )

    assert technicians._client_address(request) == "203.0.113.7"


def test_routing_health_reports_provider_status(app, monkeypatch):
    async def healthy():
        return True

    monkeypatch.setattr(health.settings, "routing_provider", "osrm")
    monkeypatch.setattr(osrm_client, "check_health", healthy)

    response = TestClient(app).get("/api/health/routing")

    assert response.status_code == 200
    assert response.json() == {"service": "osrm", "healthy": True}


def test_routing_health_reports_probe_errors(app, monkeypatch):
    async def broken():
        raise RuntimeError("connection refused")

    monkeypatch.setattr(health.settings, "routing_provider", "google")
    monkeypatch.setattr(directions_client, "check_health", broken)

    payload = TestClient(app).get("/api/health/routing").json()

    assert payload["service"] == "google"
    assert payload["healthy"] is False
    assert payload["error"] == "connection refused"


class _HealthQuery:
    def __init__(self, data=None, error=None):
        self.data = data
        self.error = error

    def select(self, columns):
        return self

    def limit(self, count):
        return self

    async def execute(self):
        if self.error:
            raise self.error
        return SimpleNamespace(data=self.data)


class _HealthSupabase:
    def __init__(self, query):
        self.query = query
        self.tables = []

    def table(self, name):
        self.tables.append(name)
        return self.query


def _patch_supabase(monkeypatch, client):
    async def get_client():
        return client

    monkeypatch.setattr(supabase_db, "get_supabase_client", get_client)


def test_database_health_connected(app, monkeypatch):
    client = _HealthSupabase(_HealthQuery(data=[{"name": "Hassen"}]))
    _patch_supabase(monkeypatch, client)

    payload = TestClient(app).get("/api/health/database").json()

    assert payload["configured"] is True
    assert payload["connected"] is True
    assert payload["technicians_available"] is True
    assert client.tables == [health.settings.technicians_table]


def test_database_health_query_error(app, monkeypatch):
    _patch_supabase(monkeypatch, _HealthSupabase(_HealthQuery(error=ConnectionError("timeout"))))

    payload = TestClient(app).get("/api/health/database").json()

    assert payload["configured"] is True
    assert payload["connected"] is False
    assert "timeout" in payload["error"]


def test_database_health_unconfigured(app, monkeypatch):
    _patch_supabase(monkeypatch, None)

    payload = TestClient(app).get("/api/health/database").json()

    assert payload["configured"] is False
