"""Collaborator interfaces consumed by the resolution core."""

from __future__ import annotations

from typing import Protocol, Sequence

from ...models.domain import Coordinate, RouteDetail, TechnicianCandidate


class SpatialTechnicianIndex(Protocol):
    async def find_nearest(self, latitude: float, longitude: float, limit: int) -> Sequence[TechnicianCandidate]:
        """Return up to ``limit`` technicians ordered by proximity; may be empty."""
        ...


class FallbackTechnicianRegistry(Protocol):
    async def get_by_name(self, name: str) -> TechnicianCandidate:
        """Return the technician with exactly this name or raise."""
        ...


class RoutingService(Protocol):
    async def route(self, origin: Coordinate, destination: Coordinate) -> RouteDetail:
        ...
