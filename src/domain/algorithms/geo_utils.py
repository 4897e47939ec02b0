from __future__ import annotations

from typing import Iterable

from src.domain.models.geo import Bounds


def bounds_of(points: Iterable[tuple[float, float]]) -> Bounds | None:
    """Smallest lat/lng box containing all (lat, lng) pairs, or None if empty."""

    south = west = float("inf")
    north = east = float("-inf")
    seen = False
    for lat, lng in points:
        seen = True
        south = min(south, lat)
        north = max(north, lat)
        west = min(west, lng)
        east = max(east, lng)

    if not seen:
        return None
    return Bounds(south=south, west=west, north=north, east=east)
