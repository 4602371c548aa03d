"""Shared geodesic distance utilities.

Spherical-Earth haversine used by the port catalog, the segmenter's path
distance, and the route assembler's straight-line distance.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional

_EARTH_RADIUS_KM: float = 6371.0  # Earth mean radius in kilometres


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two WGS-84 coordinates."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    )
    # Guard against tiny floating overshoot above 1.0 for antipodal points
    a = min(1.0, a)
    return _EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def round_km(distance: float) -> float:
    return round(distance, 2)


def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
    """True when both values are present and finite."""
    if lat is None or lon is None:
        return False
    return math.isfinite(lat) and math.isfinite(lon)


def path_length_km(points: Iterable[tuple[float, float]]) -> float:
    """Sum of consecutive haversine hops over (lat, lon) pairs."""
    total = 0.0
    prev: Optional[tuple[float, float]] = None
    for lat, lon in points:
        if prev is not None:
            total += haversine_km(prev[0], prev[1], lat, lon)
        prev = (lat, lon)
    return total
