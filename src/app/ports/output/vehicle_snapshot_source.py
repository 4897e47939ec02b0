from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Vehicle


class IVehicleSnapshotSource(ABC):
    """Port for fetching the full current vehicle collection."""

    @abstractmethod
    async def list_vehicles(self) -> tuple[Vehicle, ...]:
        raise NotImplementedError
