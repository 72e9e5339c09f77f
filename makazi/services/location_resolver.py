# makazi/services/location_resolver.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, List, Literal, Optional, TypeVar

from makazi.models import Coordinate, ProximityResult
from makazi.services.catalog import Catalog, centroid
from makazi.services.coordinate_extractor import build_strategies, extract_with_strategy
from makazi.services.geocoding import Geocoder, geocode_fallback
from makazi.services.location_errors import InvalidInput, ResolutionCancelled
from makazi.services.proximity import ProximityFilter

logger = logging.getLogger(__name__)

T = TypeVar("T")

StrategyName = Literal["at_sign", "query_param", "plus_code", "geocode"]


# --- Resolution result ---

@dataclass(frozen=True)
class Resolution:
    coordinate: Coordinate
    strategy: StrategyName
    nearby: List[ProximityResult]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "strategy": self.strategy,
            "nearby": [r.to_dict() for r in self.nearby],
        }


async def _cancellable(aw: Awaitable[T], cancel_event: Optional[asyncio.Event]) -> T:
    """Await `aw`, but give up (and cancel it) as soon as `cancel_event` is set."""
    if cancel_event is None:
        return await aw

    work = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        # the awaiting task itself was cancelled; take the in-flight call down with it
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    try:
        await work
    except asyncio.CancelledError:
        pass
    raise ResolutionCancelled()


# --- The resolver ---

class LocationResolver:
    """
    Rules (single pass, no retries):
      1) Empty reference -> InvalidInput, nothing else runs.
      2) Offline extraction: @lat,lng -> ?q=lat,lng -> plus code.
      3) Nothing extracted -> one geocode call for the /place/<name> segment.
         No place name / no candidates / provider failure -> NoCoordinateFound.
      4) Resolved -> proximity filter over the catalog (may be empty).
    """

    def __init__(
        self,
        catalog: Catalog,
        geocoder: Geocoder,
        proximity: Optional[ProximityFilter] = None,
    ):
        self.catalog = tuple(catalog)
        self.geocoder = geocoder
        self.proximity = proximity or ProximityFilter()
        # Short plus codes ("P3C5+M97") are recovered around the catalog's area
        self.strategies = build_strategies(near=centroid(self.catalog))

    async def resolve(
        self,
        reference: Any,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Resolution:
        if not isinstance(reference, str) or not reference.strip():
            raise InvalidInput()
        reference = reference.strip()

        hit = extract_with_strategy(reference, self.strategies)
        if hit is not None:
            strategy, coordinate = hit
        else:
            candidate = await _cancellable(geocode_fallback(reference, self.geocoder), cancel_event)
            strategy, coordinate = "geocode", candidate.coordinate

        nearby = self.proximity.nearby(coordinate, self.catalog)
        logger.info(
            "location_resolved strategy=%s lat=%s lng=%s nearby=%d",
            strategy,
            coordinate.latitude,
            coordinate.longitude,
            len(nearby),
        )
        return Resolution(coordinate=coordinate, strategy=strategy, nearby=nearby)
