from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from src.app.ports.output import IMapRenderer
from src.domain.algorithms.geo_utils import bounds_of
from src.domain.models import GeoPoint, Vehicle

USER_LOCATION_ZOOM = 16
FIT_PADDING_PX = 50
FIT_MAX_ZOOM = 16


@dataclass(slots=True)
class SelectionController:
    """Tracks the selected vehicle and the "my location" marker.

    Selecting does not move the camera by itself; the reconciler flies to a
    vehicle when it sees the selection transition. The user marker lives
    outside the vehicle marker table and is never touched by reconciliation.
    """

    renderer: IMapRenderer
    user_zoom: int = USER_LOCATION_ZOOM
    fly_duration_s: float = 1.5

    _selected_id: str | None = field(default=None, init=False)
    _user_marker: Any = field(default=None, init=False, repr=False)
    _user_point: GeoPoint | None = field(default=None, init=False)

    @property
    def selected_vehicle_id(self) -> str | None:
        return self._selected_id

    @property
    def user_location(self) -> GeoPoint | None:
        return self._user_point

    def select(self, vehicle_id: str) -> None:
        self._selected_id = vehicle_id

    def deselect(self) -> None:
        self._selected_id = None

    def is_selected(self, vehicle_id: str) -> bool:
        return self._selected_id is not None and self._selected_id == vehicle_id

    def show_user_location(self, point: GeoPoint) -> None:
        self.clear_user_location()
        self._user_marker = self.renderer.add_user_marker(point)
        self._user_point = point
        self.renderer.fly_to(
            lat=point.lat,
            lng=point.lon,
            zoom=self.user_zoom,
            duration_s=self.fly_duration_s,
        )

    def clear_user_location(self) -> None:
        if self._user_marker is not None:
            self.renderer.remove_marker(self._user_marker)
        self._user_marker = None
        self._user_point = None

    def fit_fleet(self, vehicles: Iterable[Vehicle]) -> bool:
        """Frame every located vehicle (and the user marker). False if nothing to frame."""

        points = [(v.location.lat, v.location.lng) for v in vehicles if v.location]
        if not points:
            return False
        if self._user_point is not None:
            points.append((self._user_point.lat, self._user_point.lon))

        bounds = bounds_of(points)
        if bounds is None:
            return False
        self.renderer.fit_bounds(bounds, padding_px=FIT_PADDING_PX, max_zoom=FIT_MAX_ZOOM)
        return True
