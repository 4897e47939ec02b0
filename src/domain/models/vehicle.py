from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .geo import Location


class VehicleStatus(str, Enum):
    MOVING = "moving"
    STOPPED = "stopped"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True, slots=True)
class GeofenceConfig:
    active: bool = False
    radius_m: int = 1000


@dataclass(frozen=True, slots=True)
class Vehicle:
    id: str
    plate: str
    model: str | None = None
    tracker_id: str | None = None
    driver_id: str | None = None
    status: VehicleStatus = VehicleStatus.STOPPED
    speed_kmh: int = 0
    fuel_level: int = 50
    is_locked: bool = False
    geofence: GeofenceConfig = field(default_factory=GeofenceConfig)
    location: Location | None = None
    last_update: datetime | None = None

    @property
    def ignition(self) -> bool:
        return self.speed_kmh > 0
