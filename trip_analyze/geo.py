"""Great-circle distances on a spherical Earth (no external dependencies)."""

from __future__ import annotations

import math
from typing import Final

EARTH_RADIUS_KM: Final[float] = 6371.0  # mean Earth radius


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two coordinates in degrees.

    Coordinates are not range-checked. The result is symmetric, non-negative
    and 0 for identical inputs.
    """

    half_d_lat = math.radians(lat2 - lat1) / 2.0
    half_d_lon = math.radians(lon2 - lon1) / 2.0
    h = math.sin(half_d_lat) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(half_d_lon) ** 2
    # h can exceed 1 by rounding for antipodal points.
    return 2.0 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """:func:`haversine_km` in meters."""

    return haversine_km(lat1, lon1, lat2, lon2) * 1000.0


def is_inside_circle(lat: float, lon: float, center_lat: float, center_lon: float, radius_m: float) -> bool:
    """True when the point lies within ``radius_m`` of the center (boundary included)."""

    return haversine_m(lat, lon, center_lat, center_lon) <= radius_m
