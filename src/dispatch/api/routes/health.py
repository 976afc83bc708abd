"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_routing_health_check():
    """Lazy import to avoid startup failures."""
    if settings.routing_provider == "osrm":
        from ...services.routing.osrm_client import check_health
    else:
        from ...services.routing.directions_client import check_health
    return check_health


@router.get("/health/routing", status_code=status.HTTP_200_OK)
async def health_routing() -> dict:
    """Check the configured routing provider."""
    try:
        check_health = _get_routing_health_check()
        status_flag = await check_health()
        return {"service": settings.routing_provider, "healthy": status_flag}
    except Exception as e:
        return {"service": settings.routing_provider, "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
async def check_database() -> dict:
    """Check database connection and technician table access."""
    from ...db.supabase import get_supabase_client

    supabase = await get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set DISPATCH_SUPABASE_URL and DISPATCH_SUPABASE_KEY environment variables.",
        }

    try:
        response = await supabase.table(settings.technicians_table).select("name").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "configured": True,
        "connected": True,
        "technicians_available": bool(response.data),
        "message": "Database connected.",
    }
