"""Nearest-technician resolution orchestration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ...models.domain import (
    Coordinate,
    Outcome,
    Technician,
    TechnicianAssignment,
    TechnicianCandidate,
)
from ..routing.estimator import RouteEstimator
from .errors import InvalidInputError, NoTechnicianAvailableError
from .guard import attempt
from .ports import FallbackTechnicianRegistry, SpatialTechnicianIndex
from .reconciler import CoordinateReconciler

if TYPE_CHECKING:
    from ..geolocation import GeolocationSource

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_TECHNICIAN = "Hassen"


class ResolutionOrchestrator:
    """Assign the nearest technician to a customer and estimate the trip.

    Steps run strictly in order: nearest lookup (falling back to the
    well-known registry technician), coordinate reconciliation, then route
    estimation. Only the first two steps can fail a request.
    """

    def __init__(
        self,
        index: SpatialTechnicianIndex,
        registry: FallbackTechnicianRegistry,
        estimator: RouteEstimator,
        reconciler: CoordinateReconciler | None = None,
        *,
        fallback_name: str = DEFAULT_FALLBACK_TECHNICIAN,
        index_timeout: float = 5.0,
        registry_timeout: float = 5.0,
    ) -> None:
        self.index = index
        self.registry = registry
        self.estimator = estimator
        self.reconciler = reconciler or CoordinateReconciler(registry, timeout=registry_timeout)
        self.fallback_name = fallback_name
        self.index_timeout = index_timeout
        self.registry_timeout = registry_timeout

    async def resolve(self, customer: Coordinate) -> TechnicianAssignment:
        if not isinstance(customer, Coordinate):
            raise InvalidInputError(f"Expected a Coordinate, got {type(customer).__name__}.")

        candidate = await self._find_technician(customer)
        location = await self.reconciler.reconcile(candidate)
        logger.info(f"Assigned technician {candidate.name} at {location.as_tuple()} to {customer.as_tuple()}")
        estimate = await self.estimator.estimate(customer, location)

        return TechnicianAssignment(
            technician=Technician(name=candidate.name, rating=candidate.rating),
            technician_location=location,
            distance_text=estimate.distance_text,
            duration_text=estimate.duration_text,
            customer_location=customer,
            route=estimate.raw,
        )

    async def resolve_position(self, latitude: float, longitude: float) -> TechnicianAssignment:
        return await self.resolve(Coordinate(latitude, longitude))

    async def resolve_from(self, geolocation: "GeolocationSource") -> TechnicianAssignment:
        """Obtain the customer's position first, then resolve it."""
        customer = await geolocation.get_current_position()
        return await self.resolve(customer)

    async def _find_technician(self, customer: Coordinate) -> TechnicianCandidate:
        nearest: Outcome[Sequence[TechnicianCandidate]] = await attempt(
            self.index.find_nearest(customer.latitude, customer.longitude, 1),
            self.index_timeout,
        )

        # An index error and an empty result take the same fallback path.
        if nearest.ok and nearest.value:
            logger.info(f"Nearest-technician query answered for {customer.as_tuple()}")
            return nearest.value[0]

        if nearest.ok:
            logger.warning("Nearest-technician query returned no candidates, using fallback technician")
        else:
            logger.warning(f"Nearest-technician query failed, using fallback technician: {nearest.error}")

        fallback = await attempt(self.registry.get_by_name(self.fallback_name), self.registry_timeout)
        if not fallback.ok or fallback.value is None:
            logger.error(f"Fallback technician '{self.fallback_name}' lookup failed: {fallback.error}")
            raise NoTechnicianAvailableError(
                "No technician is available right now. Please try again."
            ) from fallback.error

        return fallback.value
