"""HTTP client for the Google Directions API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...models.domain import Coordinate, Route, RouteDetail, RouteLeg
from .formatting import RoutingError, format_distance, format_duration

logger = logging.getLogger(__name__)


def _parse_leg(payload: dict[str, Any]) -> RouteLeg:
    distance = payload.get("distance") or {}
    duration = payload.get("duration") or {}
    distance_value = distance.get("value")
    duration_value = duration.get("value")
    return RouteLeg(
        distance_text=distance.get("text") or format_distance(distance_value),
        duration_text=duration.get("text") or format_duration(duration_value),
        distance_meters=float(distance_value) if distance_value is not None else None,
        duration_seconds=float(duration_value) if duration_value is not None else None,
    )


def parse_directions(payload: dict[str, Any]) -> RouteDetail:
    """Convert a Directions API JSON body into a RouteDetail.

    ``ZERO_RESULTS`` yields an empty route list; any other non-OK status raises.
    """
    status = payload.get("status")
    if status == "ZERO_RESULTS":
        return RouteDetail(routes=(), provider="google")
    if status != "OK":
        message = payload.get("error_message") or status or "missing status"
        raise RoutingError(f"Directions request failed: {message}")

    routes: list[Route] = []
    for route in payload.get("routes") or []:
        legs = tuple(_parse_leg(leg) for leg in route.get("legs") or [])
        polyline = (route.get("overview_polyline") or {}).get("points")
        routes.append(Route(legs=legs, polyline=polyline))
    return RouteDetail(routes=tuple(routes), provider="google")


class GoogleDirectionsClient:
    """Driving directions from Google Maps. Makes exactly one request per call."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        region: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.google_maps_api_key
        if not self.api_key:
            raise ValueError("Google Maps API key is not configured.")
        self.base_url = base_url or settings.google_directions_url
        self.region = region or settings.google_region
        self.language = language or settings.google_language
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self.transport = transport

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteDetail:
        params = {
            "origin": f"{origin.latitude},{origin.longitude}",
            "destination": f"{destination.latitude},{destination.longitude}",
            "mode": "driving",
            "units": "metric",
            "region": self.region,
            "language": self.language,
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise RoutingError(f"Directions request failed: {exc}") from exc
        except ValueError as exc:
            raise RoutingError("Directions response was not valid JSON.") from exc

        if not isinstance(payload, dict):
            raise RoutingError("Directions response has an unexpected shape.")
        return parse_directions(payload)


async def check_health(
    api_key: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Check that the Directions API answers for the configured key."""
    key = api_key or settings.google_maps_api_key
    if not key:
        return False
    params = {
        "origin": "45.5017,-73.5673",
        "destination": "45.5200,-73.5800",
        "mode": "driving",
        "key": key,
    }
    try:
        async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
            response = await client.get(settings.google_directions_url, params=params)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug(f"Directions health check failed: {exc}")
        return False
    return isinstance(data, dict) and data.get("status") == "OK"
