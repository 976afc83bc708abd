"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import settings
from ...models.domain import Coordinate, Route, RouteDetail, RouteLeg
from .formatting import RoutingError, format_distance, format_duration

logger = logging.getLogger(__name__)

# Two points in central Montreal, used to probe connectivity.
HEALTH_CHECK_COORDINATES = "-73.5673,45.5017;-73.5800,45.5200"


def parse_route(payload: dict[str, Any]) -> RouteDetail:
    """Convert an OSRM route response into a RouteDetail.

    OSRM reports distances in meters and durations in seconds without any
    display text, so text is formatted here.
    """
    code = payload.get("code")
    if code == "NoRoute":
        return RouteDetail(routes=(), provider="osrm")
    if code != "Ok":
        error_msg = payload.get("message", "Unknown OSRM route error")
        raise RoutingError(f"OSRM route request failed: {error_msg}")

    routes: list[Route] = []
    for route in payload.get("routes") or []:
        legs = []
        for leg in route.get("legs") or []:
            distance = leg.get("distance")
            duration = leg.get("duration")
            legs.append(
                RouteLeg(
                    distance_text=format_distance(distance),
                    duration_text=format_duration(duration),
                    distance_meters=float(distance) if distance is not None else None,
                    duration_seconds=float(duration) if duration is not None else None,
                )
            )
        routes.append(Route(legs=tuple(legs), polyline=route.get("geometry")))
    return RouteDetail(routes=tuple(routes), provider="osrm")


class OSRMRoutingClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self.transport = transport

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteDetail:
        """Get the driving route between two coordinates using the OSRM route endpoint."""
        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat"
        coordinate_str = ";".join(
            f"{point.longitude},{point.latitude}" for point in (origin, destination)
        )
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
                transport=self.transport,
            ) as client:
                response = await client.get(url, params=params)
                # OSRM answers NoRoute with a 400 and a JSON body.
                if response.status_code != 400:
                    response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise RoutingError(f"Failed to reach OSRM service at {self.base_url}: {exc}") from exc
        except ValueError as exc:
            raise RoutingError("OSRM response was not valid JSON.") from exc

        if not isinstance(payload, dict):
            raise RoutingError("OSRM response has an unexpected shape.")
        return parse_route(payload)


async def check_health(
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Check OSRM service health by requesting a short route.

    Public OSRM endpoints may not have a /health endpoint, so connectivity is
    tested with a minimal route request.
    """
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{HEALTH_CHECK_COORDINATES}"
    try:
        async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
            response = await client.get(url, params={"overview": "false"})
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug(f"OSRM health check failed: {exc}")
        return False
    return isinstance(data, dict) and data.get("code") == "Ok"
