#!/usr/bin/env python3
"""Helper script to check and create the .env file for the dispatch service."""

from pathlib import Path
import sys

TEMPLATE = """# Supabase Configuration (technician lookups)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
DISPATCH_SUPABASE_URL=https://your-project-id.supabase.co
DISPATCH_SUPABASE_KEY=your-key-here
DISPATCH_FALLBACK_TECHNICIAN_NAME=Hassen

# Routing (google or osrm)
DISPATCH_ROUTING_PROVIDER=google
DISPATCH_GOOGLE_MAPS_API_KEY=your-google-maps-key
# DISPATCH_OSRM_BASE_URL=http://localhost:5000

# IP geolocation (optional); {ip} is replaced with the caller address
# DISPATCH_IP_GEOLOCATION_URL=https://ipapi.co/{ip}/json/

# API Configuration
DISPATCH_API_PREFIX=/api
# DISPATCH_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    return value[:12] + "..." + value[-4:] if len(value) > 20 else value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Dispatch Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase and routing credentials!")
        return 1

    print(f"✅ Found .env file at: {env_file}")
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from dispatch.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    problems = 0
    if settings.supabase_url and settings.supabase_key:
        print(f"✅ Supabase URL: {settings.supabase_url}")
        print(f"✅ Supabase key: {_mask(settings.supabase_key)}")
    else:
        print("❌ Supabase is NOT configured (DISPATCH_SUPABASE_URL / DISPATCH_SUPABASE_KEY)")
        problems += 1

    print(f"   Fallback technician: {settings.fallback_technician_name}")
    print(f"   Routing provider: {settings.routing_provider}")
    if settings.routing_provider == "google" and not settings.google_maps_api_key:
        print("⚠️  DISPATCH_GOOGLE_MAPS_API_KEY missing: route estimates will use placeholders")
    if settings.routing_provider == "osrm" and not settings.osrm_base_url:
        print("⚠️  DISPATCH_OSRM_BASE_URL missing: route estimates will use placeholders")
    if not settings.ip_geolocation_url:
        print("   IP geolocation disabled (DISPATCH_IP_GEOLOCATION_URL not set)")

    print()
    print("=" * 60)
    print("✅ SUCCESS: configuration looks usable" if not problems else "❌ ERROR: configuration incomplete")
    print("=" * 60)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
