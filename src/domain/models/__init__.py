from .alert import Alert, AlertType
from .geo import Bounds, GeoPoint, Location
from .marker import MarkerEntry, MarkerProjection, MarkerStyle
from .position import CanonicalPosition, PositionReport
from .vehicle import GeofenceConfig, Vehicle, VehicleStatus

__all__ = [
    "Alert",
    "AlertType",
    "Bounds",
    "CanonicalPosition",
    "GeoPoint",
    "GeofenceConfig",
    "Location",
    "MarkerEntry",
    "MarkerProjection",
    "MarkerStyle",
    "PositionReport",
    "Vehicle",
    "VehicleStatus",
]
