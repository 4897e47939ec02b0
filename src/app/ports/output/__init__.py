from .map_renderer import IMapRenderer
from .vehicle_repository import IVehicleRepository
from .vehicle_snapshot_source import IVehicleSnapshotSource

__all__ = [
    "IMapRenderer",
    "IVehicleRepository",
    "IVehicleSnapshotSource",
]
