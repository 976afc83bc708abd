"""FastAPI dependencies wiring the resolution core to its collaborators."""

from __future__ import annotations

from .config import settings
from .data.technicians_repository import SupabaseTechnicianIndex, SupabaseTechnicianRegistry
from .services.resolution.orchestrator import ResolutionOrchestrator
from .services.routing.estimator import RouteEstimator, build_routing_service


def get_orchestrator() -> ResolutionOrchestrator:
    """Build a resolution orchestrator from settings for a single request."""
    estimator = RouteEstimator(
        build_routing_service(settings),
        timeout=settings.routing_timeout_seconds,
        fallback_distance_text=settings.fallback_distance_text,
        fallback_duration_text=settings.fallback_duration_text,
    )
    return ResolutionOrchestrator(
        index=SupabaseTechnicianIndex(),
        registry=SupabaseTechnicianRegistry(),
        estimator=estimator,
        fallback_name=settings.fallback_technician_name,
        index_timeout=settings.index_timeout_seconds,
        registry_timeout=settings.registry_timeout_seconds,
    )
