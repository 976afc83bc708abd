"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Technician Dispatch API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase key used for technician lookups.",
    )
    technicians_table: str = Field(default="technicians")
    nearest_technicians_rpc: str = Field(default="find_nearest_technicians")
    fallback_technician_name: str = Field(
        default="Hassen",
        description="Well-known technician returned when the nearest lookup is unavailable.",
    )

    # Routing configuration
    routing_provider: Literal["google", "osrm"] = Field(default="google")
    google_maps_api_key: Optional[str] = Field(default=None)
    google_directions_url: str = Field(default="https://maps.googleapis.com/maps/api/directions/json")
    google_region: str = Field(default="ca")
    google_language: str = Field(default="en")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(default="driving")
    fallback_distance_text: str = Field(default="~10 km")
    fallback_duration_text: str = Field(default="~30 min")

    # Geolocation configuration
    ip_geolocation_url: Optional[str] = Field(
        default=None,
        description="IP geolocation endpoint; '{ip}' is replaced with the caller address (e.g., https://ipapi.co/{ip}/json/).",
    )
    geolocation_timeout_ms: int = Field(default=5000, ge=1)
    geolocation_max_age_ms: int = Field(default=0, ge=0)

    # Per-call timeouts for external collaborators
    index_timeout_seconds: float = Field(default=5.0, gt=0.0)
    registry_timeout_seconds: float = Field(default=5.0, gt=0.0)
    routing_timeout_seconds: float = Field(default=8.0, gt=0.0)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
