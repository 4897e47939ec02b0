from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.domain.models import GeofenceConfig, Location, Vehicle, VehicleStatus


class LocationSchema(BaseModel):
    # No range validation: trackers may report anything.
    lat: float
    lng: float


class VehicleSchema(BaseModel):
    """Wire shape of a vehicle, camelCase as the dashboard expects."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    plate: str
    model: str | None = None
    tracker_id: str | None = Field(default=None, alias="trackerId")
    driver_id: str | None = Field(default=None, alias="driverId")
    status: VehicleStatus = VehicleStatus.STOPPED
    speed: int = 0
    fuel_level: int = Field(default=50, alias="fuelLevel")
    ignition: bool = False
    is_locked: bool = Field(default=False, alias="isLocked")
    geofence_active: bool = Field(default=False, alias="geofenceActive")
    geofence_radius: int = Field(default=1000, alias="geofenceRadius")
    location: LocationSchema | None = None
    last_update: datetime | None = Field(default=None, alias="lastUpdate")

    @classmethod
    def from_domain(cls, v: Vehicle) -> "VehicleSchema":
        return cls(
            id=v.id,
            plate=v.plate,
            model=v.model,
            tracker_id=v.tracker_id,
            driver_id=v.driver_id,
            status=v.status,
            speed=v.speed_kmh,
            fuel_level=v.fuel_level,
            ignition=v.ignition,
            is_locked=v.is_locked,
            geofence_active=v.geofence.active,
            geofence_radius=v.geofence.radius_m,
            location=(
                LocationSchema(lat=v.location.lat, lng=v.location.lng)
                if v.location
                else None
            ),
            last_update=v.last_update,
        )

    def to_domain(self) -> Vehicle:
        return Vehicle(
            id=self.id,
            plate=self.plate,
            model=self.model,
            tracker_id=(self.tracker_id or "").strip() or None,
            driver_id=self.driver_id,
            status=self.status,
            speed_kmh=self.speed,
            fuel_level=self.fuel_level,
            is_locked=self.is_locked,
            geofence=GeofenceConfig(
                active=self.geofence_active, radius_m=self.geofence_radius
            ),
            location=(
                Location(lat=self.location.lat, lng=self.location.lng)
                if self.location
                else None
            ),
            last_update=self.last_update,
        )


class VehicleActionSchema(BaseModel):
    """POST /vehicles body: a discriminated action, or an upsert payload."""

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["delete", "toggleLock", "upsert"] | None = None
    id: str
    plate: str | None = None
    model: str | None = None
    tracker_id: str | None = Field(default=None, alias="trackerId")
    driver_id: str | None = Field(default=None, alias="driverId")
    status: VehicleStatus = VehicleStatus.STOPPED
    speed: int = Field(default=0, ge=0)
    fuel_level: int = Field(default=50, ge=0, le=100, alias="fuelLevel")
    is_locked: bool = Field(default=False, alias="isLocked")
    geofence_active: bool = Field(default=False, alias="geofenceActive")
    geofence_radius: int = Field(default=1000, ge=0, alias="geofenceRadius")
    location: LocationSchema | None = None
    # Flat coordinates are accepted too, as the fleet form sends them.
    lat: float | None = None
    lng: float | None = None

    def to_vehicle(self) -> Vehicle:
        location = None
        if self.location is not None:
            location = Location(lat=self.location.lat, lng=self.location.lng)
        elif self.lat is not None and self.lng is not None:
            location = Location(lat=self.lat, lng=self.lng)

        # Stopped or offline vehicles report no speed.
        speed = self.speed if self.status is VehicleStatus.MOVING else 0

        return Vehicle(
            id=self.id,
            plate=self.plate or "",
            model=self.model,
            tracker_id=(self.tracker_id or "").strip() or None,
            driver_id=self.driver_id,
            status=self.status,
            speed_kmh=speed,
            fuel_level=self.fuel_level,
            is_locked=self.is_locked,
            geofence=GeofenceConfig(
                active=self.geofence_active, radius_m=self.geofence_radius
            ),
            location=location,
            last_update=datetime.now(timezone.utc),
        )


class SuccessSchema(BaseModel):
    success: bool = True
