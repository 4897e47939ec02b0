from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from src.domain.models import Bounds, GeoPoint, MarkerStyle


@dataclass
class FakeMapRenderer:
    """Records every call made against the map surface."""

    labels: dict[int, str] = field(default_factory=dict)
    added: list[tuple[str, float, float, MarkerStyle, int]] = field(default_factory=list)
    moved: list[tuple[str, float, float]] = field(default_factory=list)
    restyled: list[tuple[str, MarkerStyle, int]] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    fly_tos: list[tuple[float, float, int, float]] = field(default_factory=list)
    fitted: list[tuple[Bounds, int, int]] = field(default_factory=list)
    _next: int = 0

    def _handle(self, label: str) -> int:
        self._next += 1
        self.labels[self._next] = label
        return self._next

    def add_marker(
        self, *, vehicle_id: str, lat: float, lng: float, style: MarkerStyle, z_index: int
    ) -> int:
        self.added.append((vehicle_id, lat, lng, style, z_index))
        return self._handle(vehicle_id)

    def move_marker(self, handle: Any, *, lat: float, lng: float) -> None:
        self.moved.append((self.labels[handle], lat, lng))

    def set_marker_style(self, handle: Any, *, style: MarkerStyle, z_index: int) -> None:
        self.restyled.append((self.labels[handle], style, z_index))

    def remove_marker(self, handle: Any) -> None:
        self.removed.append(self.labels.pop(handle))

    def add_user_marker(self, point: GeoPoint) -> int:
        return self._handle("user")

    def fly_to(self, *, lat: float, lng: float, zoom: int, duration_s: float) -> None:
        self.fly_tos.append((lat, lng, zoom, duration_s))

    def fit_bounds(self, bounds: Bounds, *, padding_px: int, max_zoom: int) -> None:
        self.fitted.append((bounds, padding_px, max_zoom))

    def restyles_for(self, vehicle_id: str) -> int:
        return sum(1 for label, _, _ in self.restyled if label == vehicle_id)


@pytest.fixture
def renderer() -> FakeMapRenderer:
    return FakeMapRenderer()
