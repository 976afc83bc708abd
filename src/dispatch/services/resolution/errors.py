"""Errors surfaced by technician resolution."""


class ResolutionError(Exception):
    """Base class for errors that end a resolution request."""


class InvalidInputError(ResolutionError, ValueError):
    """Customer coordinate failed validation."""


class LocationUnavailableError(ResolutionError):
    """No position could be obtained for the customer."""


class NoTechnicianAvailableError(ResolutionError):
    """Neither the nearest-technician index nor the fallback registry yielded a technician."""


class InvalidTechnicianDataError(ResolutionError):
    """A technician record exists but cannot be reconciled to coordinates."""
