from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from src.app.ports.output import IMapRenderer
from src.domain.models import Bounds, GeoPoint, MarkerStyle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _DrawnMarker:
    label: str
    lat: float
    lng: float
    style: MarkerStyle | None = None
    z_index: int = 0


@dataclass(slots=True)
class LoggingMapRenderer(IMapRenderer):
    """Headless map surface: keeps marker state in memory and logs changes.

    Used by the monitor process; position moves are logged at DEBUG only
    since they happen on every tick.
    """

    markers: dict[int, _DrawnMarker] = field(default_factory=dict)
    _ids: Any = field(default_factory=lambda: itertools.count(1), repr=False)

    def add_marker(
        self, *, vehicle_id: str, lat: float, lng: float, style: MarkerStyle, z_index: int
    ) -> int:
        handle = next(self._ids)
        self.markers[handle] = _DrawnMarker(
            label=vehicle_id, lat=lat, lng=lng, style=style, z_index=z_index
        )
        logger.info("marker+ %s at (%.5f, %.5f) %s", vehicle_id, lat, lng, style.color)
        return handle

    def move_marker(self, handle: Any, *, lat: float, lng: float) -> None:
        m = self.markers[handle]
        m.lat, m.lng = lat, lng
        logger.debug("marker> %s to (%.5f, %.5f)", m.label, lat, lng)

    def set_marker_style(self, handle: Any, *, style: MarkerStyle, z_index: int) -> None:
        m = self.markers[handle]
        m.style, m.z_index = style, z_index
        logger.info(
            "marker~ %s %s icon=%s%s",
            m.label,
            style.color,
            style.icon,
            " [selected]" if style.emphasized else "",
        )

    def remove_marker(self, handle: Any) -> None:
        m = self.markers.pop(handle, None)
        if m is not None:
            logger.info("marker- %s", m.label)

    def add_user_marker(self, point: GeoPoint) -> int:
        handle = next(self._ids)
        self.markers[handle] = _DrawnMarker(label="me", lat=point.lat, lng=point.lon)
        logger.info("user marker at (%.5f, %.5f)", point.lat, point.lon)
        return handle

    def fly_to(self, *, lat: float, lng: float, zoom: int, duration_s: float) -> None:
        logger.info("camera fly-to (%.5f, %.5f) z%d over %.1fs", lat, lng, zoom, duration_s)

    def fit_bounds(self, bounds: Bounds, *, padding_px: int, max_zoom: int) -> None:
        logger.info(
            "camera fit [%.5f, %.5f] - [%.5f, %.5f] max z%d",
            bounds.south,
            bounds.west,
            bounds.north,
            bounds.east,
            max_zoom,
        )
