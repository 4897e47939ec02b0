from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from src.domain.models import CanonicalPosition, Vehicle


class IVehicleRepository(ABC):
    """Persistence port for the fleet's vehicle records."""

    @abstractmethod
    def list_vehicles(self) -> tuple[Vehicle, ...]:
        raise NotImplementedError

    @abstractmethod
    def get(self, vehicle_id: str) -> Vehicle | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, vehicle: Vehicle) -> None:
        """Insert or replace by id.

        Raises TrackerIdConflict if another vehicle already owns the tracker id.
        """

    @abstractmethod
    def delete(self, vehicle_id: str) -> bool:
        """Remove a vehicle; returns False if it did not exist."""

    @abstractmethod
    def toggle_lock(self, vehicle_id: str) -> Vehicle | None:
        """Flip the lock flag; returns the updated vehicle or None if missing."""

    @abstractmethod
    def apply_position(
        self, tracker_id: str, position: CanonicalPosition, *, updated_at: datetime
    ) -> bool:
        """Atomically apply a position to the vehicle owning `tracker_id`.

        Fuel level is only written when `position.fuel_or_battery` is set.
        Returns False, without writing, when no vehicle has that tracker id.
        """
