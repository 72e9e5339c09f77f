"""Shared pytest fixtures and fakes for all tests."""

import asyncio
from typing import List, Optional

import pytest

from makazi.models import Coordinate, KnownLocation
from makazi.services.catalog import DEFAULT_CATALOG
from makazi.services.geocoding import GeocodeCandidate


class FakeGeocoder:
    """Records every lookup and answers from a canned candidate list (or raises)."""

    def __init__(self, candidates: Optional[List[GeocodeCandidate]] = None, error: Optional[Exception] = None):
        self.candidates = list(candidates or [])
        self.error = error
        self.calls: List[str] = []

    async def search(self, place_name: str) -> List[GeocodeCandidate]:
        self.calls.append(place_name)
        if self.error is not None:
            raise self.error
        return list(self.candidates)


class HangingGeocoder:
    """Never answers until cancelled; remembers that it was cancelled."""

    def __init__(self):
        self.calls: List[str] = []
        self.cancelled = False

    async def search(self, place_name: str) -> List[GeocodeCandidate]:
        self.calls.append(place_name)
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return []


def candidate(lat: float, lng: float, name: str = "somewhere") -> GeocodeCandidate:
    return GeocodeCandidate(coordinate=Coordinate(lat, lng), display_name=name)


@pytest.fixture
def nakuru_catalog():
    """The two reference listings near Nakuru."""
    return DEFAULT_CATALOG


@pytest.fixture
def wide_catalog():
    """Nakuru listings plus one in Nairobi (~120 km away)."""
    return DEFAULT_CATALOG + (KnownLocation(3, "Nairobi CBD Studio", Coordinate(-1.2921, 36.8219)),)


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder([candidate(-0.2736, 36.1121, "Hyrax Hill Museum, Nakuru")])
