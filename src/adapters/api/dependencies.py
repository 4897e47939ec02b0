from __future__ import annotations

import os
from functools import lru_cache

from fastapi import Depends

from src.adapters.persistence.dynamodb_vehicle_repository import (
    DynamoDbVehicleRepository,
)
from src.adapters.persistence.sqlite_vehicle_repository import SqliteVehicleRepository
from src.app.ports.output import IVehicleRepository
from src.app.services.fleet_service import FleetService
from src.app.services.ingestion_service import IngestionService


@lru_cache(maxsize=8)
def _repository_for(backend: str, location: str | None) -> IVehicleRepository:
    # One store per (backend, location); the sqlite schema is created once.
    if backend == "dynamodb":
        return DynamoDbVehicleRepository(table_name=location)
    if backend == "sqlite":
        return SqliteVehicleRepository(db_path=location)
    raise RuntimeError(f"Unknown FLEET_STORE backend: {backend}")


def get_vehicle_repository() -> IVehicleRepository:
    backend = (os.getenv("FLEET_STORE") or "sqlite").strip().lower()
    location_var = "DDB_VEHICLES_TABLE" if backend == "dynamodb" else "FLEET_DB_PATH"
    return _repository_for(backend, os.getenv(location_var) or None)


def get_ingestion_service(
    repository: IVehicleRepository = Depends(get_vehicle_repository),
) -> IngestionService:
    service = IngestionService(vehicle_repository=repository)

    # Allow tuning via env without changing code.
    if os.getenv("MOVING_THRESHOLD_KMH"):
        service.moving_threshold_kmh = float(os.environ["MOVING_THRESHOLD_KMH"])

    return service


def get_fleet_service(
    repository: IVehicleRepository = Depends(get_vehicle_repository),
) -> FleetService:
    return FleetService(vehicle_repository=repository)
