"""Technician resolution endpoints."""

from __future__ import annotations

import logging
from typing import Awaitable

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ...dependencies import get_orchestrator
from ...models.domain import TechnicianAssignment
from ...schemas.technicians import AssignmentResponse, ResolveRequest
from ...services.geolocation import GeolocationSource, IPGeolocationCapability, ReportedPositionCapability
from ...services.resolution.errors import (
    InvalidInputError,
    InvalidTechnicianDataError,
    LocationUnavailableError,
    NoTechnicianAvailableError,
)
from ...services.resolution.orchestrator import ResolutionOrchestrator

router = APIRouter(prefix="/technicians", tags=["technicians"])

logger = logging.getLogger(__name__)


def _client_address(request: Request) -> str | None:
    # X-Forwarded-For is applied by uvicorn --proxy-headers for trusted proxies only
    return request.client.host if request.client else None


async def _run(resolution: Awaitable[TechnicianAssignment]) -> AssignmentResponse:
    try:
        assignment = await resolution
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except LocationUnavailableError as exc:
        logger.info(f"Customer location unavailable: {exc}")
        raise HTTPException(
            status_code=status.HTTP_424_FAILED_DEPENDENCY,
            detail=f"We could not determine your location. {exc}",
        ) from exc
    except NoTechnicianAvailableError as exc:
        logger.error(f"No technician available: {exc}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except InvalidTechnicianDataError as exc:
        logger.error(f"Technician data could not be reconciled: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Technician information is temporarily unavailable. Please try again.",
        ) from exc
    except Exception as exc:
        logging.exception(f"Error resolving technician: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to resolve technician: {str(exc)}",
        ) from exc
    return AssignmentResponse.from_assignment(assignment)


@router.post("/resolve", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
async def resolve(
    payload: ResolveRequest,
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> AssignmentResponse:
    """Assign the nearest technician to a position reported by the customer's device."""
    source = GeolocationSource(
        ReportedPositionCapability(payload.latitude, payload.longitude, payload.timestamp)
    )
    return await _run(orchestrator.resolve_from(source))


@router.get("/nearest", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
async def nearest(
    latitude: float = Query(..., description="Customer latitude"),
    longitude: float = Query(..., description="Customer longitude"),
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> AssignmentResponse:
    return await _run(orchestrator.resolve_position(latitude, longitude))


@router.post("/resolve/ip", response_model=AssignmentResponse, status_code=status.HTTP_200_OK)
async def resolve_by_ip(
    request: Request,
    orchestrator: ResolutionOrchestrator = Depends(get_orchestrator),
) -> AssignmentResponse:
    """Assign a technician using the approximate location of the caller's IP address."""
    source = GeolocationSource(IPGeolocationCapability(_client_address(request)))
    return await _run(orchestrator.resolve_from(source))
