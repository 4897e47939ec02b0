from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.domain.models import Bounds, GeoPoint, MarkerStyle


class IMapRenderer(ABC):
    """Port for the map surface markers are drawn on.

    Handles returned by `add_marker`/`add_user_marker` are opaque to callers.
    """

    @abstractmethod
    def add_marker(
        self, *, vehicle_id: str, lat: float, lng: float, style: MarkerStyle, z_index: int
    ) -> Any:
        """Create a vehicle marker and return its handle."""

    @abstractmethod
    def move_marker(self, handle: Any, *, lat: float, lng: float) -> None:
        """Geometry-only update."""

    @abstractmethod
    def set_marker_style(self, handle: Any, *, style: MarkerStyle, z_index: int) -> None:
        """Regenerate the marker icon; the expensive path."""

    @abstractmethod
    def remove_marker(self, handle: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def add_user_marker(self, point: GeoPoint) -> Any:
        raise NotImplementedError

    @abstractmethod
    def fly_to(self, *, lat: float, lng: float, zoom: int, duration_s: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def fit_bounds(self, bounds: Bounds, *, padding_px: int, max_zoom: int) -> None:
        raise NotImplementedError
