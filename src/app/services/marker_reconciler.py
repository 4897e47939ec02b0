from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from src.app.ports.output import IMapRenderer
from src.app.services.selection_controller import SelectionController
from src.domain.algorithms.marker_style import marker_style, project
from src.domain.models import MarkerEntry, MarkerProjection, Vehicle

logger = logging.getLogger(__name__)

SELECTION_ZOOM = 15
FLY_DURATION_S = 1.5
SELECTED_Z_INDEX = 1000


@dataclass(slots=True)
class ReconcileStats:
    created: int = 0
    moved: int = 0
    restyled: int = 0
    removed: int = 0
    flown_to: int = 0


@dataclass(slots=True)
class MarkerReconciler:
    """Diffs each vehicle snapshot against the markers already on the map.

    - Positions are updated on every tick (cheap).
    - Icons are regenerated only when the marker projection changed (expensive).
    - The camera flies to a vehicle once, when it becomes selected.

    Marker handle and cached projection share one table entry, so they are
    always created and dropped together.
    """

    renderer: IMapRenderer
    selection: SelectionController
    selection_zoom: int = SELECTION_ZOOM
    fly_duration_s: float = FLY_DURATION_S
    selected_z_index: int = SELECTED_Z_INDEX

    _markers: dict[str, MarkerEntry] = field(default_factory=dict, init=False)

    @property
    def marker_ids(self) -> frozenset[str]:
        return frozenset(self._markers)

    def projection_for(self, vehicle_id: str) -> MarkerProjection | None:
        entry = self._markers.get(vehicle_id)
        return entry.projection if entry is not None else None

    def _z_index(self, projection: MarkerProjection) -> int:
        return self.selected_z_index if projection.is_selected else 0

    def reconcile(self, vehicles: Iterable[Vehicle]) -> ReconcileStats:
        stats = ReconcileStats()
        selected_id = self.selection.selected_vehicle_id
        seen: set[str] = set()

        # Duplicate ids are not an error: later entries simply update the
        # marker the earlier one created.
        for vehicle in vehicles:
            if vehicle.location is None:
                continue
            seen.add(vehicle.id)
            lat, lng = vehicle.location.lat, vehicle.location.lng
            current = project(vehicle, selected_id=selected_id)
            entry = self._markers.get(vehicle.id)

            if entry is None:
                handle = self.renderer.add_marker(
                    vehicle_id=vehicle.id,
                    lat=lat,
                    lng=lng,
                    style=marker_style(current),
                    z_index=self._z_index(current),
                )
                self._markers[vehicle.id] = MarkerEntry(handle=handle, projection=current)
                stats.created += 1
                continue

            self.renderer.move_marker(entry.handle, lat=lat, lng=lng)
            stats.moved += 1

            previous = entry.projection
            if previous != current:
                self.renderer.set_marker_style(
                    entry.handle,
                    style=marker_style(current),
                    z_index=self._z_index(current),
                )
                entry.projection = current
                stats.restyled += 1

            if current.is_selected and not previous.is_selected:
                self.renderer.fly_to(
                    lat=lat,
                    lng=lng,
                    zoom=self.selection_zoom,
                    duration_s=self.fly_duration_s,
                )
                stats.flown_to += 1

        for vehicle_id in [vid for vid in self._markers if vid not in seen]:
            entry = self._markers.pop(vehicle_id)
            self.renderer.remove_marker(entry.handle)
            stats.removed += 1

        if stats.created or stats.removed or stats.restyled:
            logger.debug(
                "Reconciled markers: +%d ~%d -%d",
                stats.created,
                stats.restyled,
                stats.removed,
            )
        return stats

    def clear(self) -> None:
        """Remove every vehicle marker, e.g. on logout."""

        for entry in self._markers.values():
            self.renderer.remove_marker(entry.handle)
        self._markers.clear()
