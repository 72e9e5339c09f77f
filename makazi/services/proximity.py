from __future__ import annotations

import logging
from math import atan2, cos, radians, sin, sqrt
from typing import List, Sequence

from makazi.config import NEARBY_RADIUS_KM
from makazi.models import Coordinate, KnownLocation, ProximityResult

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two points in kilometers (spherical Earth)."""
    dlat = radians(b.latitude - a.latitude)
    dlng = radians(b.longitude - a.longitude)
    h = sin(dlat / 2) ** 2 + cos(radians(a.latitude)) * cos(radians(b.latitude)) * sin(dlng / 2) ** 2
    h = min(1.0, h) # rounding can push antipodal points just past 1.0
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


class ProximityFilter:
    """
    Keeps catalog entries within `radius_km` of a point (boundary inclusive).
    Results come back in catalog order. The catalog is only read.
    """

    def __init__(self, radius_km: float = NEARBY_RADIUS_KM):
        if radius_km <= 0:
            raise ValueError("radius_km must be positive")
        self.radius_km = radius_km

    def nearby(self, origin: Coordinate, catalog: Sequence[KnownLocation]) -> List[ProximityResult]:
        results: List[ProximityResult] = []
        for location in catalog:
            distance = haversine_km(origin, location.coordinate)
            if distance <= self.radius_km:
                results.append(ProximityResult(location=location, distance_km=distance))

        logger.info("proximity_filter catalog=%d nearby=%d radius_km=%s", len(catalog), len(results), self.radius_km)
        return results
