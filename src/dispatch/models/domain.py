"""Domain models for technician resolution and route estimation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from ..services.resolution.errors import InvalidInputError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A validated latitude/longitude pair."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        try:
            latitude = float(self.latitude)
            longitude = float(self.longitude)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Coordinate values must be numeric: {exc}") from exc
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            raise InvalidInputError("Coordinate values must be finite.")
        if not -90.0 <= latitude <= 90.0:
            raise InvalidInputError(f"Latitude {latitude} is outside [-90, 90].")
        if not -180.0 <= longitude <= 180.0:
            raise InvalidInputError(f"Longitude {longitude} is outside [-180, 180].")
        object.__setattr__(self, "latitude", latitude)
        object.__setattr__(self, "longitude", longitude)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class Technician:
    name: str
    rating: float


@dataclass(frozen=True, slots=True)
class DirectCoordinateCandidate:
    """Technician record that carries its own latitude/longitude."""

    name: str
    rating: float
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class DerivedDistanceCandidate:
    """Technician record from the nearest-neighbour query.

    Carries routing-derived fields instead of raw coordinates, so the
    coordinates have to be fetched again by name.
    """

    name: str
    rating: float
    address: str
    distance: float


@dataclass(frozen=True, slots=True)
class UnshapedCandidate:
    """Technician record with neither coordinates nor derived fields."""

    name: str
    rating: float
    raw: dict = field(default_factory=dict)


TechnicianCandidate = Union[DirectCoordinateCandidate, DerivedDistanceCandidate, UnshapedCandidate]


@dataclass(frozen=True, slots=True)
class RouteLeg:
    distance_text: str
    duration_text: str
    distance_meters: Optional[float] = None
    duration_seconds: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Route:
    legs: tuple[RouteLeg, ...]
    polyline: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RouteDetail:
    """Normalized driving directions returned by a routing provider."""

    routes: tuple[Route, ...]
    provider: str


@dataclass(frozen=True, slots=True)
class RouteEstimate:
    distance_text: str
    duration_text: str
    raw: Optional[RouteDetail] = None

    @property
    def is_fallback(self) -> bool:
        return self.raw is None


@dataclass(frozen=True, slots=True)
class TechnicianAssignment:
    """Terminal output of a resolution request."""

    technician: Technician
    technician_location: Coordinate
    distance_text: str
    duration_text: str
    customer_location: Optional[Coordinate] = None
    route: Optional[RouteDetail] = None


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of a guarded collaborator call: either a value or the error raised."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Outcome[T]":
        return cls(error=error)
