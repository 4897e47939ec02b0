from .fleet import FleetError, TrackerIdConflict, VehicleNotFound
from .ingestion import IngestionError, MalformedReport, StorageFailure

__all__ = [
    "FleetError",
    "IngestionError",
    "MalformedReport",
    "StorageFailure",
    "TrackerIdConflict",
    "VehicleNotFound",
]
