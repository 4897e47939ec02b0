from __future__ import annotations

from dataclasses import dataclass

from .vehicle import VehicleStatus

# Trackers report speed in m/s.
MPS_TO_KMH = 3.6
MOVING_THRESHOLD_KMH = 2


@dataclass(frozen=True, slots=True)
class PositionReport:
    """A validated OsmAnd/Traccar location report.

    Only produced by `parse_position_report`; required fields are guaranteed
    present and numeric, optional ones are None when absent or unparseable.
    """

    device_id: str
    lat: float
    lon: float
    speed_mps: float | None = None
    battery: float | None = None
    timestamp: str | None = None


@dataclass(frozen=True, slots=True)
class CanonicalPosition:
    lat: float
    lng: float
    speed_kmh: int
    motion_state: VehicleStatus
    fuel_or_battery: int | None = None  # None means "leave stored value alone"
