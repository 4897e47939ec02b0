from __future__ import annotations

from src.domain.models.marker import MarkerProjection, MarkerStyle
from src.domain.models.vehicle import Vehicle, VehicleStatus

_LOCKED = ("#dc2626", "rgba(220,38,38,0.8)")
_BY_STATUS: dict[VehicleStatus, tuple[str, str | None]] = {
    VehicleStatus.MOVING: ("#3b82f6", "rgba(59,130,246,0.6)"),
    VehicleStatus.STOPPED: ("#eab308", "rgba(234,179,8,0.6)"),
}
_FALLBACK = ("#64748b", None)


def project(vehicle: Vehicle, *, selected_id: str | None) -> MarkerProjection:
    return MarkerProjection(
        status=vehicle.status,
        is_locked=vehicle.is_locked,
        is_selected=selected_id is not None and vehicle.id == selected_id,
    )


def marker_style(projection: MarkerProjection) -> MarkerStyle:
    # Lock overrides the motion colour.
    if projection.is_locked:
        color, glow = _LOCKED
    else:
        color, glow = _BY_STATUS.get(projection.status, _FALLBACK)

    return MarkerStyle(
        color=color,
        glow=glow,
        icon="lock" if projection.is_locked else "truck",
        pulse=not projection.is_locked and projection.status is VehicleStatus.MOVING,
        emphasized=projection.is_selected,
    )
