from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

import pytest

from src.adapters.persistence.sqlite_vehicle_repository import SqliteVehicleRepository
from src.domain.exceptions import TrackerIdConflict
from src.domain.models import (
    CanonicalPosition,
    GeofenceConfig,
    Location,
    Vehicle,
    VehicleStatus,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(tmp_path) -> SqliteVehicleRepository:
    r = SqliteVehicleRepository(db_path=tmp_path / "fleet.db")
    r.save(
        Vehicle(
            id="v1",
            plate="ABC-1234",
            model="Fiat Fiorino",
            tracker_id="IMEI-1",
            fuel_level=78,
            geofence=GeofenceConfig(active=True, radius_m=500),
            location=Location(lat=1.0, lng=2.0),
            last_update=NOW,
        )
    )
    r.save(Vehicle(id="v2", plate="XYZ-9876", fuel_level=45, last_update=NOW))
    return r


def _position(**overrides) -> CanonicalPosition:
    base = {
        "lat": -23.5,
        "lng": -46.6,
        "speed_kmh": 45,
        "motion_state": VehicleStatus.MOVING,
        "fuel_or_battery": None,
    }
    base.update(overrides)
    return CanonicalPosition(**base)


def test_round_trips_vehicle_fields(repo: SqliteVehicleRepository) -> None:
    v1 = repo.get("v1")

    assert v1 is not None
    assert v1.plate == "ABC-1234"
    assert v1.geofence == GeofenceConfig(active=True, radius_m=500)
    assert v1.location == Location(lat=1.0, lng=2.0)
    assert v1.last_update == NOW
    assert [v.id for v in repo.list_vehicles()] == ["v1", "v2"]


def test_tracker_index_exists(repo: SqliteVehicleRepository) -> None:
    conn = sqlite3.connect(str(repo.db_path))
    try:
        names = {row[1] for row in conn.execute("PRAGMA index_list('vehicles')")}
    finally:
        conn.close()
    assert "idx_vehicles_tracker_id" in names


def test_apply_position_updates_by_tracker_id(repo: SqliteVehicleRepository) -> None:
    assert repo.apply_position("IMEI-1", _position(), updated_at=NOW) is True

    v1 = repo.get("v1")
    assert v1.location == Location(lat=-23.5, lng=-46.6)
    assert v1.speed_kmh == 45
    assert v1.status is VehicleStatus.MOVING
    assert v1.fuel_level == 78


def test_apply_position_writes_battery_only_when_present(
    repo: SqliteVehicleRepository,
) -> None:
    repo.apply_position("IMEI-1", _position(fuel_or_battery=12), updated_at=NOW)
    assert repo.get("v1").fuel_level == 12

    repo.apply_position("IMEI-1", _position(), updated_at=NOW)
    assert repo.get("v1").fuel_level == 12


def test_apply_position_unknown_tracker_writes_nothing(
    repo: SqliteVehicleRepository,
) -> None:
    before = repo.list_vehicles()

    assert repo.apply_position("GHOST", _position(), updated_at=NOW) is False
    assert repo.list_vehicles() == before


def test_save_rejects_duplicate_tracker_id(repo: SqliteVehicleRepository) -> None:
    with pytest.raises(TrackerIdConflict):
        repo.save(Vehicle(id="v3", plate="DEF-5566", tracker_id="IMEI-1"))

    # The original owner is untouched.
    assert repo.get("v1").tracker_id == "IMEI-1"


def test_save_updates_existing_row(repo: SqliteVehicleRepository) -> None:
    repo.save(Vehicle(id="v2", plate="XYZ-0000", tracker_id="IMEI-2"))

    v2 = repo.get("v2")
    assert v2.plate == "XYZ-0000"
    assert v2.tracker_id == "IMEI-2"
    assert len(repo.list_vehicles()) == 2


def test_toggle_lock_and_delete(repo: SqliteVehicleRepository) -> None:
    assert repo.toggle_lock("v2").is_locked is True
    assert repo.toggle_lock("v2").is_locked is False
    assert repo.toggle_lock("missing") is None

    assert repo.delete("v2") is True
    assert repo.delete("v2") is False
    assert repo.get("v2") is None
