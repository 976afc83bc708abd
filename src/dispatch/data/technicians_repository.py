"""Technician lookups backed by Supabase: nearest-neighbour RPC and exact-name fetch."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from supabase import AsyncClient

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import (
    DerivedDistanceCandidate,
    DirectCoordinateCandidate,
    TechnicianCandidate,
    UnshapedCandidate,
)
from ..services.resolution.errors import InvalidTechnicianDataError

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Supabase is not configured or the client could not be created."""


class TechnicianNotFoundError(LookupError):
    """No technician row matched the requested name."""


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def candidate_from_row(row: Mapping[str, Any]) -> TechnicianCandidate:
    """Parse a technician row into one of the candidate shapes.

    Rows from the ``technicians`` table carry latitude/longitude; rows from the
    nearest-technician RPC carry address and distance instead.
    """
    name = str(row.get("name") or "").strip()
    if not name:
        raise InvalidTechnicianDataError("Technician record has no name.")
    rating = _to_float(row.get("rating")) or 0.0

    latitude = _to_float(row.get("latitude"))
    longitude = _to_float(row.get("longitude"))
    if latitude is not None and longitude is not None:
        return DirectCoordinateCandidate(name=name, rating=rating, latitude=latitude, longitude=longitude)

    address = str(row.get("address") or "").strip()
    distance = _to_float(row.get("distance"))
    if address and distance is not None:
        return DerivedDistanceCandidate(name=name, rating=rating, address=address, distance=distance)

    return UnshapedCandidate(name=name, rating=rating, raw=dict(row))


async def _resolve_client(client: AsyncClient | None) -> AsyncClient:
    supabase = client or await get_supabase_client()
    if supabase is None:
        raise DatabaseUnavailableError("Supabase is not configured.")
    return supabase


class SupabaseTechnicianIndex:
    """Nearest-technician query through the ``find_nearest_technicians`` RPC."""

    def __init__(self, client: AsyncClient | None = None, rpc_name: str | None = None) -> None:
        self.client = client
        self.rpc_name = rpc_name or settings.nearest_technicians_rpc

    async def find_nearest(self, latitude: float, longitude: float, limit: int) -> list[TechnicianCandidate]:
        supabase = await _resolve_client(self.client)
        response = await (
            supabase.rpc(self.rpc_name, {"user_lat": latitude, "user_lon": longitude})
            .limit(limit)
            .execute()
        )
        rows = response.data or []
        logger.debug(f"Nearest-technician RPC returned {len(rows)} rows")
        return [candidate_from_row(row) for row in rows[:limit]]


class SupabaseTechnicianRegistry:
    """Exact-name technician fetch from the technicians table."""

    def __init__(self, client: AsyncClient | None = None, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.technicians_table

    async def get_by_name(self, name: str) -> TechnicianCandidate:
        supabase = await _resolve_client(self.client)
        response = await (
            supabase.table(self.table)
            .select("*")
            .eq("name", name)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows:
            raise TechnicianNotFoundError(f"Technician '{name}' not found.")
        return candidate_from_row(rows[0])
