"""Text formatting and geometry helpers shared by routing providers."""

from __future__ import annotations

UNKNOWN_TEXT = "Unknown"


class RoutingError(Exception):
    """A routing provider could not produce directions."""


def format_distance(meters: float | None) -> str:
    """Format a distance the way driving-directions providers display it ("850 m", "8.2 km")."""
    if meters is None:
        return UNKNOWN_TEXT
    if meters < 1000:
        return f"{int(round(meters))} m"
    km = meters / 1000
    if km >= 100:
        return f"{int(round(km))} km"
    return f"{km:.1f} km"


def format_duration(seconds: float | None) -> str:
    """Format a duration as "1 min", "22 mins" or "1 hour 5 mins"."""
    if seconds is None:
        return UNKNOWN_TEXT
    total_minutes = max(int(round(seconds / 60)), 1)
    hours, minutes = divmod(total_minutes, 60)
    parts: list[str] = []
    if hours:
        parts.append(f"{hours} hour" if hours == 1 else f"{hours} hours")
    if minutes:
        parts.append(f"{minutes} min" if minutes == 1 else f"{minutes} mins")
    return " ".join(parts)


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    Google Directions and OSRM both use this encoding for route geometry.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        dlat = ~(result >> 1) if (result & 1) else (result >> 1)
        lat += dlat

        shift = 0
        result = 0
        while True:
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        dlon = ~(result >> 1) if (result & 1) else (result >> 1)
        lon += dlon

        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates
