"""Technician resolution request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Coordinate, TechnicianAssignment
from ..services.routing.formatting import decode_polyline


class ResolveRequest(BaseModel):
    latitude: float = Field(..., description="Customer latitude reported by the device.")
    longitude: float = Field(..., description="Customer longitude reported by the device.")
    timestamp: Optional[datetime] = Field(
        default=None,
        description="When the device took the position fix.",
    )


class CoordinateModel(BaseModel):
    latitude: float
    longitude: float

    @classmethod
    def from_domain(cls, coordinate: Coordinate) -> "CoordinateModel":
        return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)


class TechnicianModel(BaseModel):
    name: str
    rating: float


class AssignmentResponse(BaseModel):
    technician: TechnicianModel
    technician_location: CoordinateModel
    customer_location: Optional[CoordinateModel] = None
    distance_text: str
    duration_text: str
    route_available: bool = Field(
        default=False,
        description="False when distance/duration are approximate placeholders.",
    )
    route_path: List[CoordinateModel] = Field(
        default_factory=list,
        description="Driving path for map display, empty when no route was computed.",
    )

    @classmethod
    def from_assignment(cls, assignment: TechnicianAssignment) -> "AssignmentResponse":
        path: list[CoordinateModel] = []
        route = assignment.route
        if route is not None and route.routes and route.routes[0].polyline:
            path = [
                CoordinateModel(latitude=lat, longitude=lon)
                for lat, lon in decode_polyline(route.routes[0].polyline)
            ]
        return cls(
            technician=TechnicianModel(
                name=assignment.technician.name,
                rating=assignment.technician.rating,
            ),
            technician_location=CoordinateModel.from_domain(assignment.technician_location),
            customer_location=(
                CoordinateModel.from_domain(assignment.customer_location)
                if assignment.customer_location is not None
                else None
            ),
            distance_text=assignment.distance_text,
            duration_text=assignment.duration_text,
            route_available=route is not None,
            route_path=path,
        )
