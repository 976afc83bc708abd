"""Route estimation with a fixed placeholder when directions are unavailable."""

from __future__ import annotations

import logging

from ...config import Settings, settings as default_settings
from ...models.domain import Coordinate, RouteDetail, RouteEstimate, RouteLeg
from ..resolution.guard import attempt
from ..resolution.ports import RoutingService
from .formatting import UNKNOWN_TEXT, RoutingError

logger = logging.getLogger(__name__)

FALLBACK_DISTANCE_TEXT = "~10 km"
FALLBACK_DURATION_TEXT = "~30 min"


def first_leg(detail: object) -> RouteLeg | None:
    """Return the first leg of the first route, or None when there is none."""
    if not isinstance(detail, RouteDetail) or not detail.routes:
        return None
    legs = detail.routes[0].legs
    if not legs:
        return None
    return legs[0]


class UnavailableRoutingService:
    """Stand-in used when no routing provider is configured; every call fails."""

    def __init__(self, reason: str) -> None:
        self.reason = reason

    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteDetail:
        raise RoutingError(self.reason)


def build_routing_service(config: Settings | None = None) -> RoutingService:
    """Create the routing client selected by ``routing_provider``."""
    from .directions_client import GoogleDirectionsClient
    from .osrm_client import OSRMRoutingClient

    config = config or default_settings
    try:
        if config.routing_provider == "osrm":
            return OSRMRoutingClient(
                base_url=config.osrm_base_url,
                profile=config.osrm_profile,
                timeout=config.routing_timeout_seconds,
            )
        return GoogleDirectionsClient(
            api_key=config.google_maps_api_key,
            base_url=config.google_directions_url,
            region=config.google_region,
            language=config.google_language,
            timeout=config.routing_timeout_seconds,
        )
    except ValueError as exc:
        logger.warning(f"Routing provider '{config.routing_provider}' unavailable: {exc}")
        return UnavailableRoutingService(str(exc))


class RouteEstimator:
    """Distance/duration between two points; never raises to the caller.

    One routing attempt is made per call. Any failure, timeout or response
    without a route leg yields the fixed placeholder pair with ``raw`` unset.
    The placeholder texts are approximate and must not be shown as measured.
    """

    def __init__(
        self,
        service: RoutingService,
        *,
        timeout: float = 8.0,
        fallback_distance_text: str = FALLBACK_DISTANCE_TEXT,
        fallback_duration_text: str = FALLBACK_DURATION_TEXT,
    ) -> None:
        self.service = service
        self.timeout = timeout
        self.fallback_distance_text = fallback_distance_text
        self.fallback_duration_text = fallback_duration_text

    def fallback(self) -> RouteEstimate:
        return RouteEstimate(
            distance_text=self.fallback_distance_text,
            duration_text=self.fallback_duration_text,
            raw=None,
        )

    async def estimate(self, origin: Coordinate, destination: Coordinate) -> RouteEstimate:
        outcome = await attempt(self.service.route(origin, destination), self.timeout)
        if not outcome.ok:
            logger.warning(f"Route calculation failed, using placeholder estimate: {outcome.error}")
            return self.fallback()

        leg = first_leg(outcome.value)
        if leg is None:
            logger.warning("Routing response contained no route legs, using placeholder estimate")
            return self.fallback()

        return RouteEstimate(
            distance_text=leg.distance_text or UNKNOWN_TEXT,
            duration_text=leg.duration_text or UNKNOWN_TEXT,
            raw=outcome.value,
        )
