from __future__ import annotations

import math
from typing import Any, Mapping

from src.domain.exceptions import MalformedReport
from src.domain.models.position import (
    MOVING_THRESHOLD_KMH,
    MPS_TO_KMH,
    CanonicalPosition,
    PositionReport,
)
from src.domain.models.vehicle import VehicleStatus

REQUIRED_FIELDS_MESSAGE = "Insufficient data. Required: id, lat, lon"

# OsmAnd clients and Traccar forks disagree on field names.
_DEVICE_ID_KEYS = ("id", "deviceid")
_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "lng", "longitude")
_SPEED_KEYS = ("speed",)
_BATTERY_KEYS = ("batt", "battery")
_TIMESTAMP_KEYS = ("timestamp",)


def _first(payload: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(out):
        return None
    return out


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_position_report(payload: Mapping[str, Any]) -> PositionReport:
    """Validate a raw report payload.

    Raises MalformedReport when the device id is missing or lat/lon are
    missing or not numeric. Optional fields that do not parse are dropped.
    """

    raw_id = _first(payload, _DEVICE_ID_KEYS)
    device_id = str(raw_id).strip() if raw_id is not None else ""
    if not device_id:
        raise MalformedReport(REQUIRED_FIELDS_MESSAGE)

    lat = _to_float(_first(payload, _LAT_KEYS))
    lon = _to_float(_first(payload, _LON_KEYS))
    if lat is None or lon is None:
        raise MalformedReport(REQUIRED_FIELDS_MESSAGE)

    raw_ts = _first(payload, _TIMESTAMP_KEYS)

    return PositionReport(
        device_id=device_id,
        lat=lat,
        lon=lon,
        speed_mps=_to_float(_first(payload, _SPEED_KEYS)),
        battery=_to_float(_first(payload, _BATTERY_KEYS)),
        timestamp=str(raw_ts).strip() if raw_ts is not None else None,
    )


def normalize_position(
    report: PositionReport, *, moving_threshold_kmh: float = MOVING_THRESHOLD_KMH
) -> CanonicalPosition:
    raw_kmh = (report.speed_mps or 0.0) * MPS_TO_KMH
    # Huge readings overflow to inf once converted; treat them as no speed.
    if not math.isfinite(raw_kmh):
        raw_kmh = 0.0
    speed_kmh = max(0, round_half_up(raw_kmh))
    motion_state = (
        VehicleStatus.MOVING
        if speed_kmh > moving_threshold_kmh
        else VehicleStatus.STOPPED
    )

    fuel_or_battery = None
    if report.battery is not None:
        fuel_or_battery = max(0, min(100, int(math.floor(report.battery))))

    return CanonicalPosition(
        lat=report.lat,
        lng=report.lon,
        speed_kmh=speed_kmh,
        motion_state=motion_state,
        fuel_or_battery=fuel_or_battery,
    )
