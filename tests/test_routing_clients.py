import httpx
import pytest

from dispatch.models.domain import Coordinate
from dispatch.services.routing import directions_client, osrm_client
from dispatch.services.routing.directions_client import GoogleDirectionsClient, parse_directions
from dispatch.services.routing.formatting import (
    RoutingError,
    decode_polyline,
    format_distance,
    format_duration,
)
from dispatch.services.routing.osrm_client import OSRMRoutingClient

CUSTOMER = Coordinate(45.5017, -73.5673)
TECHNICIAN = Coordinate(45.52, -73.58)

DIRECTIONS_OK = {
    "status": "OK",
    "routes": [
        {
            "legs": [
                {
                    "distance": {"text": "8.2 km", "value": 8214},
                    "duration": {"text": "22 mins", "value": 1318},
                }
            ],
            "overview_polyline": {"points": "_p~iF~ps|U_ulLnnqC_mqNvxq`@"},
        }
    ],
}


def test_format_distance():
    assert format_distance(850) == "850 m"
    assert format_distance(8214) == "8.2 km"
    assert format_distance(123456) == "123 km"
    assert format_distance(None) == "Unknown"


def test_format_duration():
    assert format_duration(20) == "1 min"
    assert format_duration(1318) == "22 mins"
    assert format_duration(3900) == "1 hour 5 mins"
    assert format_duration(7200) == "2 hours"
    assert format_duration(None) == "Unknown"


def test_decode_polyline():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")

    assert points == [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_parse_directions_fills_missing_text_from_values():
    payload = {
        "status": "OK",
        "routes": [{"legs": [{"distance": {"value": 950}, "duration": {"value": 300}}]}],
    }

    leg = parse_directions(payload).routes[0].legs[0]

    assert leg.distance_text == "950 m"
    assert leg.duration_text == "5 mins"


def test_parse_directions_zero_results_is_empty():
    detail = parse_directions({"status": "ZERO_RESULTS", "routes": []})

    assert detail.routes == ()


def test_parse_directions_error_status_raises():
    with pytest.raises(RoutingError, match="REQUEST_DENIED|key"):
        parse_directions({"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."})


@pytest.mark.anyio
async def test_google_client_requests_driving_route():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json=DIRECTIONS_OK)

    client = GoogleDirectionsClient(api_key="test-key", transport=httpx.MockTransport(handler))
    detail = await client.route(CUSTOMER, TECHNICIAN)

    assert seen["origin"] == "45.5017,-73.5673"
    assert seen["destination"] == "45.52,-73.58"
    assert seen["mode"] == "driving"
    assert seen["key"] == "test-key"
    assert detail.provider == "google"
    assert detail.routes[0].legs[0].distance_text == "8.2 km"
    assert detail.routes[0].polyline == "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


@pytest.mark.anyio
async def test_google_client_http_error_raises_routing_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    client = GoogleDirectionsClient(api_key="test-key", transport=transport)

    with pytest.raises(RoutingError):
        await client.route(CUSTOMER, TECHNICIAN)


@pytest.mark.anyio
async def test_google_client_invalid_json_raises_routing_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    client = GoogleDirectionsClient(api_key="test-key", transport=transport)

    with pytest.raises(RoutingError):
        await client.route(CUSTOMER, TECHNICIAN)


def test_google_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(directions_client.settings, "google_maps_api_key", None)

    with pytest.raises(ValueError):
        GoogleDirectionsClient()


@pytest.mark.anyio
async def test_osrm_client_formats_leg_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [
                    {
                        "distance": 8214.3,
                        "duration": 1318.0,
                        "geometry": "_p~iF~ps|U_ulLnnqC_mqNvxq`@",
                        "legs": [{"distance": 8214.3, "duration": 1318.0}],
                    }
                ],
            },
        )

    client = OSRMRoutingClient(base_url="http://osrm.local", transport=httpx.MockTransport(handler))
    detail = await client.route(CUSTOMER, TECHNICIAN)

    assert seen["path"] == "/route/v1/driving/-73.5673,45.5017;-73.58,45.52"
    leg = detail.routes[0].legs[0]
    assert (leg.distance_text, leg.duration_text) == ("8.2 km", "22 mins")
    assert detail.provider == "osrm"


@pytest.mark.anyio
async def test_osrm_no_route_is_empty_detail():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(400, json={"code": "NoRoute", "message": "Impossible route"})
    )
    client = OSRMRoutingClient(base_url="http://osrm.local", transport=transport)

    detail = await client.route(CUSTOMER, TECHNICIAN)

    assert detail.routes == ()


@pytest.mark.anyio
async def test_osrm_error_code_raises_routing_error():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(400, json={"code": "InvalidQuery", "message": "bad coordinates"})
    )
    client = OSRMRoutingClient(base_url="http://osrm.local", transport=transport)

    with pytest.raises(RoutingError, match="bad coordinates"):
        await client.route(CUSTOMER, TECHNICIAN)


@pytest.mark.anyio
async def test_osrm_health_check():
    healthy = httpx.MockTransport(lambda request: httpx.Response(200, json={"code": "Ok", "routes": []}))
    failing = httpx.MockTransport(lambda request: httpx.Response(503))

    assert await osrm_client.check_health("http://osrm.local", transport=healthy) is True
    assert await osrm_client.check_health("http://osrm.local", transport=failing) is False


@pytest.mark.anyio
async def test_directions_health_check_without_key(monkeypatch):
    monkeypatch.setattr(directions_client.settings, "google_maps_api_key", None)

    assert await directions_client.check_health() is False
