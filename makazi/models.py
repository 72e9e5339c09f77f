"""
Value objects shared by the location resolver: coordinates, catalog entries, proximity hits.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Coordinate:
    """Immutable, validated latitude/longitude pair (degrees)."""

    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {self.longitude}")

    @classmethod
    def from_values(cls, latitude: Any, longitude: Any) -> Optional["Coordinate"]:
        """
        Build a Coordinate from already-parsed numbers (or numeric strings).
        Returns None instead of raising when the pair is unusable.
        """
        try:
            lat = float(latitude)
            lng = float(longitude)
        except (TypeError, ValueError):
            return None
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            return None
        return cls(lat, lng)

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class KnownLocation:
    id: int
    title: str
    coordinate: Coordinate


@dataclass(frozen=True)
class ProximityResult:
    location: KnownLocation
    distance_km: float # not rounded; display rounding is the client's job

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.location.id,
            "title": self.location.title,
            "distance_km": self.distance_km,
        }
