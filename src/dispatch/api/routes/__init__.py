"""Route group exports."""

from . import health, technicians

__all__ = ["health", "technicians"]
