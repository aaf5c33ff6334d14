from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Sequence

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Calculate the great circle distance in kilometres between two points
    on the earth (specified in decimal degrees).

    Ranges are not validated; out-of-range inputs give a defined number
    that carries no geographic meaning.
    """
    lat1_rad, lon1_rad = radians(a.latitude), radians(a.longitude)
    lat2_rad, lon2_rad = radians(b.latitude), radians(b.longitude)

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    h = sin(dlat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2) ** 2
    # Rounding can push h a hair outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def path_length_km(points: Sequence[Coordinate]) -> float:
    """Sum of leg distances along an ordered sequence of points."""

    return sum(
        (distance_km(points[i], points[i + 1]) for i in range(len(points) - 1)),
        0.0,
    )
