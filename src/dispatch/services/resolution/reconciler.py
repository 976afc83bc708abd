"""Normalize technician records from either lookup path into a coordinate."""

from __future__ import annotations

import logging

from ...models.domain import (
    Coordinate,
    DerivedDistanceCandidate,
    DirectCoordinateCandidate,
    TechnicianCandidate,
    UnshapedCandidate,
)
from .errors import InvalidInputError, InvalidTechnicianDataError
from .guard import attempt
from .ports import FallbackTechnicianRegistry

logger = logging.getLogger(__name__)


def _direct_coordinate(candidate: DirectCoordinateCandidate) -> Coordinate:
    try:
        return Coordinate(candidate.latitude, candidate.longitude)
    except InvalidInputError as exc:
        raise InvalidTechnicianDataError(
            f"Technician '{candidate.name}' has invalid coordinates: {exc}"
        ) from exc


class CoordinateReconciler:
    """Resolve a technician candidate of any shape to a Coordinate.

    Records from the nearest-technician query carry an address and a
    distance instead of coordinates; those are re-fetched from the registry
    by technician name. Names are assumed to be unique.
    """

    def __init__(self, registry: FallbackTechnicianRegistry, *, timeout: float = 5.0) -> None:
        self.registry = registry
        self.timeout = timeout

    async def reconcile(self, candidate: TechnicianCandidate) -> Coordinate:
        if isinstance(candidate, DirectCoordinateCandidate):
            return _direct_coordinate(candidate)

        if isinstance(candidate, DerivedDistanceCandidate):
            return await self._lookup_coordinate(candidate)

        if isinstance(candidate, UnshapedCandidate):
            raise InvalidTechnicianDataError(
                f"Technician '{candidate.name}' has neither coordinates nor address/distance."
            )

        raise InvalidTechnicianDataError(f"Unsupported technician record: {candidate!r}")

    async def _lookup_coordinate(self, candidate: DerivedDistanceCandidate) -> Coordinate:
        outcome = await attempt(self.registry.get_by_name(candidate.name), self.timeout)
        if not outcome.ok:
            logger.warning(f"Coordinate lookup for technician '{candidate.name}' failed: {outcome.error}")
            raise InvalidTechnicianDataError(
                f"Could not look up coordinates for technician '{candidate.name}'."
            ) from outcome.error

        record = outcome.value
        if not isinstance(record, DirectCoordinateCandidate):
            raise InvalidTechnicianDataError(
                f"Registry record for technician '{candidate.name}' has no coordinates."
            )
        return _direct_coordinate(record)
