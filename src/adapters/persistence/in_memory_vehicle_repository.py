from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable

from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import TrackerIdConflict
from src.domain.models import CanonicalPosition, Location, Vehicle


@dataclass(slots=True)
class InMemoryVehicleRepository(IVehicleRepository):
    """Process-local store, mostly for tests and demos.

    Each instance owns its own dict; nothing is shared between instances.
    """

    vehicles: dict[str, Vehicle] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def seeded(cls, vehicles: Iterable[Vehicle]) -> "InMemoryVehicleRepository":
        return cls(vehicles={v.id: v for v in vehicles})

    def list_vehicles(self) -> tuple[Vehicle, ...]:
        with self._lock:
            return tuple(self.vehicles.values())

    def get(self, vehicle_id: str) -> Vehicle | None:
        with self._lock:
            return self.vehicles.get(vehicle_id)

    def save(self, vehicle: Vehicle) -> None:
        with self._lock:
            if vehicle.tracker_id:
                for other in self.vehicles.values():
                    if other.id != vehicle.id and other.tracker_id == vehicle.tracker_id:
                        raise TrackerIdConflict(
                            f"Tracker '{vehicle.tracker_id}' already bound to vehicle '{other.id}'"
                        )
            self.vehicles[vehicle.id] = vehicle

    def delete(self, vehicle_id: str) -> bool:
        with self._lock:
            return self.vehicles.pop(vehicle_id, None) is not None

    def toggle_lock(self, vehicle_id: str) -> Vehicle | None:
        with self._lock:
            current = self.vehicles.get(vehicle_id)
            if current is None:
                return None
            updated = replace(current, is_locked=not current.is_locked)
            self.vehicles[vehicle_id] = updated
            return updated

    def apply_position(
        self, tracker_id: str, position: CanonicalPosition, *, updated_at: datetime
    ) -> bool:
        with self._lock:
            target = next(
                (v for v in self.vehicles.values() if v.tracker_id == tracker_id), None
            )
            if target is None:
                return False

            fuel = (
                position.fuel_or_battery
                if position.fuel_or_battery is not None
                else target.fuel_level
            )
            self.vehicles[target.id] = replace(
                target,
                location=Location(lat=position.lat, lng=position.lng),
                speed_kmh=position.speed_kmh,
                status=position.motion_state,
                fuel_level=fuel,
                last_update=updated_at,
            )
            return True
