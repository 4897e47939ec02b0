class FleetError(Exception):
    """Base exception for fleet collection operations."""


class VehicleNotFound(FleetError):
    """Raised when an operation targets a vehicle id that does not exist."""


class TrackerIdConflict(FleetError):
    """Raised when a tracker id is already bound to another vehicle."""
