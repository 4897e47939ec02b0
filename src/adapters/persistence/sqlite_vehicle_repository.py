from __future__ import annotations

import os
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import TrackerIdConflict
from src.domain.models import (
    CanonicalPosition,
    GeofenceConfig,
    Location,
    Vehicle,
    VehicleStatus,
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS vehicles (
    id TEXT PRIMARY KEY,
    plate TEXT NOT NULL,
    model TEXT,
    tracker_id TEXT,
    driver_id TEXT,
    status TEXT NOT NULL DEFAULT 'stopped',
    lat REAL,
    lng REAL,
    speed INTEGER NOT NULL DEFAULT 0,
    fuel_level INTEGER NOT NULL DEFAULT 50,
    is_locked INTEGER NOT NULL DEFAULT 0,
    geofence_active INTEGER NOT NULL DEFAULT 0,
    geofence_radius INTEGER NOT NULL DEFAULT 1000,
    last_update TEXT
)
"""

# Ingestion looks vehicles up by tracker id on every report.
_TRACKER_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_vehicles_tracker_id ON vehicles(tracker_id)
"""

_COLUMNS = (
    "id, plate, model, tracker_id, driver_id, status, lat, lng, speed, "
    "fuel_level, is_locked, geofence_active, geofence_radius, last_update"
)
_UPDATABLE = tuple(c.strip() for c in _COLUMNS.split(",") if c.strip() != "id")


def _row_to_vehicle(row: sqlite3.Row) -> Vehicle:
    location = None
    if row["lat"] is not None and row["lng"] is not None:
        location = Location(lat=float(row["lat"]), lng=float(row["lng"]))

    last_update = None
    if row["last_update"]:
        last_update = datetime.fromisoformat(row["last_update"])

    return Vehicle(
        id=row["id"],
        plate=row["plate"],
        model=row["model"],
        tracker_id=row["tracker_id"],
        driver_id=row["driver_id"],
        status=VehicleStatus(row["status"]),
        speed_kmh=int(row["speed"]),
        fuel_level=int(row["fuel_level"]),
        is_locked=bool(row["is_locked"]),
        geofence=GeofenceConfig(
            active=bool(row["geofence_active"]),
            radius_m=int(row["geofence_radius"]),
        ),
        location=location,
        last_update=last_update,
    )


def _vehicle_params(vehicle: Vehicle) -> tuple[Any, ...]:
    return (
        vehicle.id,
        vehicle.plate,
        vehicle.model,
        vehicle.tracker_id or None,
        vehicle.driver_id,
        vehicle.status.value,
        vehicle.location.lat if vehicle.location else None,
        vehicle.location.lng if vehicle.location else None,
        vehicle.speed_kmh,
        vehicle.fuel_level,
        int(vehicle.is_locked),
        int(vehicle.geofence.active),
        vehicle.geofence.radius_m,
        (vehicle.last_update or datetime.now(timezone.utc)).isoformat(),
    )


@dataclass(slots=True)
class SqliteVehicleRepository(IVehicleRepository):
    """Relational vehicle store backed by SQLite.

    Env vars:
      - FLEET_DB_PATH (default: data/fleet.db)

    A connection is opened per operation; SQLite serializes writers, so the
    single-statement UPDATE in `apply_position` is atomic per row.
    """

    db_path: str | Path | None = None

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = os.getenv("FLEET_DB_PATH") or "data/fleet.db"
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(_SCHEMA)
            conn.execute(_TRACKER_INDEX)

    def list_vehicles(self) -> tuple[Vehicle, ...]:
        with closing(self._connect()) as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM vehicles ORDER BY id").fetchall()
        return tuple(_row_to_vehicle(r) for r in rows)

    def get(self, vehicle_id: str) -> Vehicle | None:
        with closing(self._connect()) as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM vehicles WHERE id = ?", (vehicle_id,)
            ).fetchone()
        return _row_to_vehicle(row) if row is not None else None

    def save(self, vehicle: Vehicle) -> None:
        try:
            with closing(self._connect()) as conn, conn:
                # Not INSERT OR REPLACE: that would silently delete the row
                # holding a conflicting tracker id.
                conn.execute(
                    f"INSERT INTO vehicles ({_COLUMNS}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                    "ON CONFLICT(id) DO UPDATE SET "
                    + ", ".join(f"{c} = excluded.{c}" for c in _UPDATABLE),
                    _vehicle_params(vehicle),
                )
        except sqlite3.IntegrityError as exc:
            raise TrackerIdConflict(
                f"Tracker '{vehicle.tracker_id}' already bound to another vehicle"
            ) from exc

    def delete(self, vehicle_id: str) -> bool:
        with closing(self._connect()) as conn, conn:
            cur = conn.execute("DELETE FROM vehicles WHERE id = ?", (vehicle_id,))
            return cur.rowcount > 0

    def toggle_lock(self, vehicle_id: str) -> Vehicle | None:
        with closing(self._connect()) as conn, conn:
            cur = conn.execute(
                "UPDATE vehicles SET is_locked = NOT is_locked WHERE id = ?",
                (vehicle_id,),
            )
            if cur.rowcount == 0:
                return None
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM vehicles WHERE id = ?", (vehicle_id,)
            ).fetchone()
        return _row_to_vehicle(row)

    def apply_position(
        self, tracker_id: str, position: CanonicalPosition, *, updated_at: datetime
    ) -> bool:
        query = "UPDATE vehicles SET lat = ?, lng = ?, speed = ?, status = ?, last_update = ?"
        params: list[Any] = [
            position.lat,
            position.lng,
            position.speed_kmh,
            position.motion_state.value,
            updated_at.isoformat(),
        ]
        if position.fuel_or_battery is not None:
            query += ", fuel_level = ?"
            params.append(position.fuel_or_battery)
        query += " WHERE tracker_id = ?"
        params.append(tracker_id)

        with closing(self._connect()) as conn, conn:
            cur = conn.execute(query, params)
            return cur.rowcount > 0
