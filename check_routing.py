#!/usr/bin/env python3
"""Script to verify routing provider connectivity and a sample route estimate."""

import asyncio
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from dispatch.config import settings
from dispatch.models.domain import Coordinate
from dispatch.services.routing.estimator import RouteEstimator, build_routing_service


async def run() -> int:
    print("=" * 60)
    print(f"Routing Connection Test ({settings.routing_provider})")
    print("=" * 60)
    print()

    if settings.routing_provider == "osrm":
        from dispatch.services.routing.osrm_client import check_health
    else:
        from dispatch.services.routing.directions_client import check_health

    print("1. Testing provider health check...")
    if await check_health():
        print("   [OK] Routing provider is reachable")
    else:
        print("   [ERROR] Routing provider is not responding or not configured")
        return 1
    print()

    print("2. Estimating a sample route (downtown Montreal)...")
    estimator = RouteEstimator(build_routing_service(settings), timeout=settings.routing_timeout_seconds)
    estimate = await estimator.estimate(Coordinate(45.5017, -73.5673), Coordinate(45.52, -73.58))
    print(f"   Distance: {estimate.distance_text}")
    print(f"   Duration: {estimate.duration_text}")
    if estimate.is_fallback:
        print("   [ERROR] Placeholder estimate returned; check the logs above")
        return 1
    print("   [OK] Measured route returned")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
