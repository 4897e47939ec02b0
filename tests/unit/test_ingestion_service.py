from __future__ import annotations

from datetime import datetime

import pytest

from src.adapters.persistence.in_memory_vehicle_repository import (
    InMemoryVehicleRepository,
)
from src.app.services.ingestion_service import IngestionService, IngestOutcome
from src.domain.exceptions import MalformedReport, StorageFailure
from src.domain.models import CanonicalPosition, Location, Vehicle, VehicleStatus


def _fleet() -> InMemoryVehicleRepository:
    return InMemoryVehicleRepository.seeded(
        [
            Vehicle(
                id="v1",
                plate="ABC-1234",
                tracker_id="IMEI-1",
                fuel_level=78,
                location=Location(lat=0.0, lng=0.0),
            ),
            Vehicle(id="v2", plate="XYZ-9876", tracker_id="IMEI-2", fuel_level=45),
        ]
    )


class _BrokenRepository(InMemoryVehicleRepository):
    def apply_position(
        self, tracker_id: str, position: CanonicalPosition, *, updated_at: datetime
    ) -> bool:
        raise ConnectionError("database unavailable")


def test_ingest_updates_matching_vehicle() -> None:
    repo = _fleet()
    svc = IngestionService(vehicle_repository=repo)

    outcome = svc.ingest({"id": "IMEI-1", "lat": "-23.5", "lon": "-46.6", "speed": "1.0"})

    assert outcome is IngestOutcome.UPDATED
    v1 = repo.get("v1")
    assert v1 is not None
    assert v1.location == Location(lat=-23.5, lng=-46.6)
    assert v1.speed_kmh == 4
    assert v1.status is VehicleStatus.MOVING
    assert v1.last_update is not None and v1.last_update.tzinfo is not None


def test_ingest_without_battery_preserves_fuel_level() -> None:
    repo = _fleet()
    svc = IngestionService(vehicle_repository=repo)

    svc.ingest({"id": "IMEI-1", "lat": "1", "lon": "2"})

    assert repo.get("v1").fuel_level == 78


def test_ingest_with_battery_overwrites_fuel_level() -> None:
    repo = _fleet()
    svc = IngestionService(vehicle_repository=repo)

    svc.ingest({"id": "IMEI-1", "lat": "1", "lon": "2", "batt": "33.7"})

    assert repo.get("v1").fuel_level == 33


def test_unknown_tracker_is_a_no_op() -> None:
    repo = _fleet()
    before = dict(repo.vehicles)
    svc = IngestionService(vehicle_repository=repo)

    outcome = svc.ingest({"id": "GHOST", "lat": "1", "lon": "2"})

    assert outcome is IngestOutcome.UNMATCHED
    assert repo.vehicles == before


def test_malformed_report_never_reaches_the_store() -> None:
    repo = _fleet()
    before = dict(repo.vehicles)
    svc = IngestionService(vehicle_repository=repo)

    with pytest.raises(MalformedReport):
        svc.ingest({"id": "IMEI-1", "lon": "2"})

    assert repo.vehicles == before


def test_storage_errors_become_storage_failure_with_device_id() -> None:
    svc = IngestionService(vehicle_repository=_BrokenRepository())

    with pytest.raises(StorageFailure) as info:
        svc.ingest({"id": "IMEI-1", "lat": "1", "lon": "2"})

    assert info.value.device_id == "IMEI-1"
    assert "database unavailable" in str(info.value)


def test_moving_threshold_can_be_tuned() -> None:
    repo = _fleet()
    svc = IngestionService(vehicle_repository=repo, moving_threshold_kmh=50)

    svc.ingest({"id": "IMEI-2", "lat": "1", "lon": "2", "speed": "10"})

    v2 = repo.get("v2")
    assert v2.speed_kmh == 36
    assert v2.status is VehicleStatus.STOPPED
