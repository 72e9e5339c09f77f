"""
Geocode fallback: place name from a map link -> coordinates via OpenStreetMap Nominatim.

Only used when no coordinate could be read straight out of the link.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import unquote

import httpx

from makazi.config import GEOCODE_TIMEOUT_SECONDS, NOMINATIM_BASE_URL, NOMINATIM_USER_AGENT
from makazi.models import Coordinate
from makazi.services.location_errors import GeocodeProviderError, NoCoordinateFound

logger = logging.getLogger(__name__)

# .../maps/place/Hyrax+Hill+Museum/@... -> "Hyrax+Hill+Museum"
_PLACE_RE = re.compile(r"/place/([^/?#]+)")


@dataclass(frozen=True)
class GeocodeCandidate:
    coordinate: Coordinate
    display_name: Optional[str] = None


# --- Contract (so the provider can be swapped or faked in tests) ---

class Geocoder(Protocol):
    async def search(self, place_name: str) -> List[GeocodeCandidate]:
        """Place name -> candidates in provider order. Raises GeocodeProviderError on failure."""


def extract_place_name(reference: str) -> Optional[str]:
    match = _PLACE_RE.search(reference or "")
    if not match:
        return None
    name = unquote(match.group(1)).replace("+", " ")
    name = " ".join(name.split())
    return name or None


def _parse_candidates(raw: Any) -> List[GeocodeCandidate]:
    if not isinstance(raw, list):
        raise GeocodeProviderError("Unexpected geocoding payload (expected a list)", payload=raw)

    out: List[GeocodeCandidate] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        # Nominatim sends lat/lon as strings ("-0.2736")
        coordinate = Coordinate.from_values(item.get("lat"), item.get("lon"))
        if coordinate is None:
            continue
        out.append(GeocodeCandidate(coordinate=coordinate, display_name=item.get("display_name")))
    return out


class NominatimGeocoder:
    """
    Thin async client for GET {base_url}/search?q=...&format=json.

    The httpx client is injected so the app can share one connection pool
    (and tests can plug in httpx.MockTransport).
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        timeout: float = GEOCODE_TIMEOUT_SECONDS,
        limit: int = 1,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.limit = limit

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def search(self, place_name: str) -> List[GeocodeCandidate]:
        params = {"q": place_name, "format": "json", "limit": str(self.limit)}

        try:
            r = await self.client.get(
                f"{self.base_url}/search",
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise GeocodeProviderError(f"Geocoding timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise GeocodeProviderError(f"Geocoding transport error: {e!r}") from e

        if not r.is_success:
            raise GeocodeProviderError(
                f"Geocoding provider error {r.status_code}",
                status_code=r.status_code,
                payload=r.text[:200],
            )

        try:
            raw = r.json()
        except ValueError as e:
            raise GeocodeProviderError("Geocoding provider returned invalid JSON", status_code=r.status_code) from e

        return _parse_candidates(raw)


async def geocode_fallback(reference: str, geocoder: Geocoder) -> GeocodeCandidate:
    """
    Resolve the /place/<name> segment of a link with exactly one provider call (no retries).

    Raises NoCoordinateFound when there is no place name, the provider has no
    candidates, or the provider call fails. Provider details only go to the log.
    """
    place_name = extract_place_name(reference)
    if not place_name:
        raise NoCoordinateFound("no_place_name")

    logger.info("geocode_lookup place=%s", place_name)
    try:
        candidates = await geocoder.search(place_name)
    except GeocodeProviderError as e:
        logger.warning("geocode_provider_failed place=%s status=%s error=%s", place_name, e.status_code, str(e))
        raise NoCoordinateFound("provider_error") from e

    if not candidates:
        logger.info("geocode_no_candidates place=%s", place_name)
        raise NoCoordinateFound("no_candidates")

    # provider order wins, no re-ranking
    return candidates[0]
