from __future__ import annotations

from dataclasses import dataclass, replace

from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import VehicleNotFound
from src.domain.models import Vehicle


@dataclass(slots=True)
class FleetService:
    """CRUD over the vehicle collection, as consumed by the dashboard."""

    vehicle_repository: IVehicleRepository

    def list_vehicles(self) -> tuple[Vehicle, ...]:
        return self.vehicle_repository.list_vehicles()

    def upsert(self, vehicle: Vehicle, *, keep_lock: bool = True) -> Vehicle:
        """Insert or update a vehicle.

        With `keep_lock`, an existing vehicle keeps its lock flag; locking goes
        through `toggle_lock` only.
        """

        existing = self.vehicle_repository.get(vehicle.id)
        if existing is not None and keep_lock:
            vehicle = replace(vehicle, is_locked=existing.is_locked)
        self.vehicle_repository.save(vehicle)
        return vehicle

    def delete(self, vehicle_id: str) -> None:
        if not self.vehicle_repository.delete(vehicle_id):
            raise VehicleNotFound(vehicle_id)

    def toggle_lock(self, vehicle_id: str) -> Vehicle:
        vehicle = self.vehicle_repository.toggle_lock(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(vehicle_id)
        return vehicle
