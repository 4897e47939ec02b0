from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Iterable
from uuid import uuid4

from src.domain.models import Alert, AlertType, GeofenceConfig, Vehicle
from src.domain.models.alert import Severity

logger = logging.getLogger(__name__)

SPEED_LIMIT_KMH = 100

_ID_PREFIX = {
    AlertType.SPEED: "auto-spd",
    AlertType.SOS: "auto-sos",
    AlertType.GEOFENCE: "auto-geo",
    AlertType.MAINTENANCE: "auto-mnt",
}


@dataclass(slots=True)
class AlertMonitor:
    """Derives alerts from vehicle snapshots and keeps the alert history.

    History is newest first. A speed alert is only raised for a vehicle when
    it has no unresolved speed alert already.

    Event alerts come from comparing a snapshot with the previous one:
      - lock flips raise SOS (locking is high and pending, unlocking is
        medium and born resolved)
      - geofence changes raise an informational GEOFENCE alert
      - ids not seen before raise an informational MAINTENANCE alert

    The first snapshot after construction or `forget_fleet()` is a baseline
    and raises speed alerts only.
    """

    speed_limit_kmh: int = SPEED_LIMIT_KMH
    history: list[Alert] = field(default_factory=list)

    _known: dict[str, tuple[bool, GeofenceConfig]] | None = field(
        default=None, init=False, repr=False
    )

    def observe(self, vehicles: Iterable[Vehicle]) -> tuple[Alert, ...]:
        vehicles = tuple(vehicles)
        raised: list[Alert] = []
        for v in vehicles:
            if self._known is not None:
                raised.extend(self._events_for(v, self._known.get(v.id)))

            if v.speed_kmh <= self.speed_limit_kmh:
                continue
            if self._has_pending(v.id, AlertType.SPEED):
                continue
            raised.append(
                self._raise(
                    v.id,
                    AlertType.SPEED,
                    "high",
                    f"Speed detected: {v.speed_kmh} km/h "
                    f"(limit: {self.speed_limit_kmh} km/h)",
                )
            )
            logger.warning("Speed alert for vehicle %s at %d km/h", v.id, v.speed_kmh)

        self._known = {v.id: (v.is_locked, v.geofence) for v in vehicles}
        return tuple(raised)

    def _events_for(
        self, v: Vehicle, previous: tuple[bool, GeofenceConfig] | None
    ) -> list[Alert]:
        if previous is None:
            logger.info("Vehicle %s joined the fleet", v.id)
            return [
                self._raise(
                    v.id,
                    AlertType.MAINTENANCE,
                    "low",
                    "New vehicle added to the fleet.",
                    resolved=True,
                )
            ]

        out: list[Alert] = []
        was_locked, geofence = previous
        if v.is_locked != was_locked:
            if v.is_locked:
                desc = f"LOCK ENGAGED: vehicle {v.plate} was immobilized remotely."
            else:
                desc = f"LOCK RELEASED: vehicle {v.plate} is cleared for operation."
            out.append(
                self._raise(
                    v.id,
                    AlertType.SOS,
                    "high" if v.is_locked else "medium",
                    desc,
                    resolved=not v.is_locked,
                )
            )
            logger.warning("Vehicle %s %s", v.id, "locked" if v.is_locked else "unlocked")

        if v.geofence != geofence:
            if v.geofence.active:
                desc = f"Geofence ENABLED (radius: {v.geofence.radius_m}m)"
            else:
                desc = "Geofence DISABLED"
            out.append(self._raise(v.id, AlertType.GEOFENCE, "low", desc, resolved=True))
            logger.info("Geofence changed for vehicle %s", v.id)
        return out

    def _raise(
        self,
        vehicle_id: str,
        alert_type: AlertType,
        severity: Severity,
        description: str,
        *,
        resolved: bool = False,
    ) -> Alert:
        alert = Alert(
            id=f"{_ID_PREFIX[alert_type]}-{uuid4().hex[:12]}",
            vehicle_id=vehicle_id,
            type=alert_type,
            severity=severity,
            created_at=datetime.now(timezone.utc),
            resolved=resolved,
            description=description,
        )
        self.history.insert(0, alert)
        return alert

    def _has_pending(self, vehicle_id: str, alert_type: AlertType) -> bool:
        return any(
            a.vehicle_id == vehicle_id and a.type is alert_type and not a.resolved
            for a in self.history
        )

    @property
    def unresolved(self) -> tuple[Alert, ...]:
        return tuple(a for a in self.history if not a.resolved)

    def mark_all_read(self) -> None:
        self.history = [replace(a, resolved=True) for a in self.history]

    def dismiss(self, alert_id: str) -> bool:
        """Drop one alert from the history. False if it was not there."""

        kept = [a for a in self.history if a.id != alert_id]
        found = len(kept) != len(self.history)
        self.history = kept
        return found

    def clear(self) -> None:
        self.history.clear()

    def forget_fleet(self) -> None:
        # The next snapshot becomes a fresh baseline.
        self._known = None
