"""
Errors raised while turning a location reference into nearby listings.
"""
from __future__ import annotations

from typing import Any, Optional


class LocationResolutionError(RuntimeError):
    """Base class. Routers turn these into JSON error bodies."""

    status_code = 400
    public_message = "could not extract or find coordinates"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class InvalidInput(LocationResolutionError):
    """Missing / empty location reference. Nothing in the pipeline ran."""

    public_message = "invalid request"


class NoCoordinateFound(LocationResolutionError):
    """Neither extraction nor the geocode fallback produced a coordinate."""

    def __init__(self, reason: str):
        super().__init__()
        self.reason = reason # "no_place_name" | "no_candidates" | "provider_error"


class ResolutionCancelled(LocationResolutionError):
    """Caller abandoned the request while the geocode call was in flight."""

    status_code = 499 # client closed request (nginx convention)
    public_message = "request cancelled"


class MalformedShortCode(ValueError):
    """A plus code matched the pattern but is not decodable. Never leaves the extractor."""


class GeocodeProviderError(RuntimeError):
    """Raised when the geocoding provider fails (transport, timeout, non-2xx, bad payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
