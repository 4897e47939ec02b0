from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

Severity = Literal["low", "medium", "high"]


class AlertType(str, Enum):
    SPEED = "speed"
    GEOFENCE = "geofence"
    MAINTENANCE = "maintenance"
    SOS = "sos"


@dataclass(frozen=True, slots=True)
class Alert:
    id: str
    vehicle_id: str
    type: AlertType
    severity: Severity
    created_at: datetime
    resolved: bool = False
    description: str | None = None
