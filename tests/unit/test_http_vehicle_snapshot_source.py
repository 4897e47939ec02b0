from __future__ import annotations

import asyncio

import httpx
import pytest

from src.adapters.realtime.http_vehicle_snapshot_source import (
    HttpVehicleSnapshotSource,
)
from src.domain.models import Location, VehicleStatus

PAYLOAD = [
    {
        "id": "v1",
        "plate": "ABC-1234",
        "model": "Fiat Fiorino 2023",
        "trackerId": "IMEI-1",
        "status": "moving",
        "speed": 45,
        "fuelLevel": 78,
        "ignition": True,
        "isLocked": True,
        "geofenceActive": False,
        "geofenceRadius": 1000,
        "location": {"lat": -23.55, "lng": -46.63},
        "lastUpdate": "2026-01-08T08:00:00Z",
    },
    {"id": "v2", "plate": "XYZ-9876"},
]


def test_parses_camel_case_fleet_and_sends_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=PAYLOAD)

    source = HttpVehicleSnapshotSource(
        base_url="http://fleet.test/api/",
        headers_raw="Authorization: Bearer abc; X-Tenant:acme;broken",
        transport=httpx.MockTransport(handler),
    )

    v1, v2 = asyncio.run(source.list_vehicles())

    assert str(seen[0].url) == "http://fleet.test/api/vehicles"
    assert seen[0].headers["authorization"] == "Bearer abc"
    assert seen[0].headers["x-tenant"] == "acme"
    assert v1.tracker_id == "IMEI-1"
    assert v1.status is VehicleStatus.MOVING
    assert v1.is_locked is True
    assert v1.location == Location(lat=-23.55, lng=-46.63)
    assert v2.location is None
    assert v2.status is VehicleStatus.STOPPED


def test_server_error_raises() -> None:
    source = HttpVehicleSnapshotSource(
        base_url="http://fleet.test",
        transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(source.list_vehicles())


def test_missing_base_url_raises(monkeypatch) -> None:
    monkeypatch.delenv("FLEET_API_URL", raising=False)
    source = HttpVehicleSnapshotSource()

    with pytest.raises(RuntimeError, match="FLEET_API_URL"):
        asyncio.run(source.list_vehicles())


def test_env_configuration(monkeypatch) -> None:
    monkeypatch.setenv("FLEET_API_URL", "http://env.test")
    monkeypatch.setenv("FLEET_POLL_TIMEOUT_S", "2.5")

    source = HttpVehicleSnapshotSource()

    assert source.base_url == "http://env.test"
    assert source.timeout_s == 2.5
