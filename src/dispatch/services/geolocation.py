"""Customer position sources."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

import httpx

from ..config import settings
from ..models.domain import Coordinate
from .resolution.errors import InvalidInputError, LocationUnavailableError

logger = logging.getLogger(__name__)


class GeolocationCapability(Protocol):
    async def current_position(self, timeout_ms: int, max_age_ms: int) -> Coordinate:
        ...


class ReportedPositionCapability:
    """A position fix reported by the customer's device."""

    def __init__(self, latitude: float, longitude: float, timestamp: datetime | None = None) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.timestamp = timestamp

    async def current_position(self, timeout_ms: int, max_age_ms: int) -> Coordinate:
        if max_age_ms > 0 and self.timestamp is not None:
            taken_at = self.timestamp
            if taken_at.tzinfo is None:
                taken_at = taken_at.replace(tzinfo=timezone.utc)
            age_ms = (datetime.now(timezone.utc) - taken_at).total_seconds() * 1000
            if age_ms > max_age_ms:
                raise LocationUnavailableError(
                    f"Reported position is {age_ms:.0f} ms old (limit {max_age_ms} ms)."
                )
        return Coordinate(self.latitude, self.longitude)


def _extract_coordinate(payload: Any) -> Coordinate:
    if not isinstance(payload, dict) or payload.get("error"):
        reason = payload.get("reason") if isinstance(payload, dict) else None
        raise LocationUnavailableError(f"IP geolocation failed: {reason or 'no result'}")
    latitude = payload.get("latitude", payload.get("lat"))
    longitude = payload.get("longitude", payload.get("lon"))
    if latitude is None or longitude is None:
        raise LocationUnavailableError("IP geolocation response has no coordinates.")
    try:
        return Coordinate(latitude, longitude)
    except InvalidInputError as exc:
        raise LocationUnavailableError(f"IP geolocation returned an invalid position: {exc}") from exc


class IPGeolocationCapability:
    """Approximate position of a caller from their public IP address."""

    def __init__(
        self,
        ip_address: str | None,
        url_template: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.ip_address = ip_address
        self.url_template = url_template or settings.ip_geolocation_url
        self.transport = transport

    async def current_position(self, timeout_ms: int, max_age_ms: int) -> Coordinate:
        if not self.url_template:
            raise LocationUnavailableError("IP geolocation is not configured.")
        if not self.ip_address:
            raise LocationUnavailableError("Caller address is unknown.")
        try:
            address = ipaddress.ip_address(self.ip_address)
        except ValueError as exc:
            raise LocationUnavailableError(f"Invalid caller address '{self.ip_address}'.") from exc
        if not address.is_global:
            raise LocationUnavailableError(f"Caller address {address} cannot be geolocated.")

        url = self.url_template.replace("{ip}", str(address))
        try:
            async with httpx.AsyncClient(timeout=timeout_ms / 1000, transport=self.transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as exc:
            raise LocationUnavailableError(f"IP geolocation request failed: {exc}") from exc
        except ValueError as exc:
            raise LocationUnavailableError("IP geolocation response was not valid JSON.") from exc
        return _extract_coordinate(payload)


class GeolocationSource:
    """Single-attempt wrapper around a geolocation capability.

    Retrying is left to the user, who can trigger resolution again.
    """

    def __init__(
        self,
        capability: GeolocationCapability | None,
        *,
        timeout_ms: int | None = None,
        max_age_ms: int | None = None,
    ) -> None:
        self.capability = capability
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.geolocation_timeout_ms
        self.max_age_ms = max_age_ms if max_age_ms is not None else settings.geolocation_max_age_ms

    async def get_current_position(
        self,
        timeout_ms: int | None = None,
        max_age_ms: int | None = None,
    ) -> Coordinate:
        if self.capability is None:
            raise LocationUnavailableError("Geolocation is not supported for this client.")

        timeout_ms = timeout_ms if timeout_ms is not None else self.timeout_ms
        max_age_ms = max_age_ms if max_age_ms is not None else self.max_age_ms
        try:
            return await asyncio.wait_for(
                self.capability.current_position(timeout_ms, max_age_ms),
                timeout=timeout_ms / 1000,
            )
        except (LocationUnavailableError, InvalidInputError):
            raise
        except asyncio.TimeoutError as exc:
            raise LocationUnavailableError(f"Timed out after {timeout_ms} ms waiting for a position.") from exc
        except Exception as exc:
            logger.warning(f"Geolocation capability failed: {exc}")
            raise LocationUnavailableError(f"Position unavailable: {exc}") from exc
