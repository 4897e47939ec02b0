from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .vehicle import VehicleStatus


@dataclass(frozen=True, slots=True)
class MarkerProjection:
    """The subset of a vehicle that changes how its marker is drawn."""

    status: VehicleStatus
    is_locked: bool
    is_selected: bool


@dataclass(frozen=True, slots=True)
class MarkerStyle:
    color: str
    glow: str | None
    icon: str  # "truck" or "lock"
    pulse: bool = False
    emphasized: bool = False


@dataclass(slots=True)
class MarkerEntry:
    handle: Any
    projection: MarkerProjection
