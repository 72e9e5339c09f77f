"""
This service pulls a coordinate out of a pasted map link or plus code, without any network call.
"""
from __future__ import annotations

import logging
import re
from functools import partial
from typing import Callable, Optional, Tuple

from openlocationcode import openlocationcode as olc

from makazi.models import Coordinate
from makazi.services.location_errors import MalformedShortCode

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Optional[Coordinate]]

_NUM = r"-?\d+(?:\.\d+)?" # signed decimal, never matches junk like "1.2.3" or "--5"

# .../@-0.2838,36.0725,15z (canonical map-sharing link)
_AT_SIGN_RE = re.compile(rf"@({_NUM}),({_NUM})")
# ...?q=-0.27,36.11 or ...&q=-0.27,36.11
_QUERY_PARAM_RE = re.compile(rf"[?&]q=({_NUM}),({_NUM})")
# Plus code (Open Location Code) e.g. 6GCRPR6C+24 or P3C5+M97
_PLUS_CODE_RE = re.compile(r"([A-Z0-9]{4,}\+[A-Z0-9]{2,})", re.IGNORECASE)


def from_at_sign(reference: str) -> Optional[Coordinate]:
    match = _AT_SIGN_RE.search(reference)
    if not match:
        return None
    return Coordinate.from_values(match.group(1), match.group(2))


def from_query_param(reference: str) -> Optional[Coordinate]:
    match = _QUERY_PARAM_RE.search(reference)
    if not match:
        return None
    return Coordinate.from_values(match.group(1), match.group(2))


def decode_plus_code(code: str, near: Optional[Coordinate] = None) -> Coordinate:
    """
    Decode a plus code to the centre of its grid cell.

    Full codes decode on their own. Short codes (e.g. "P3C5+M97") need a nearby
    reference point and are recovered to the closest matching full code.
    Raises MalformedShortCode when the code cannot be decoded.
    """
    code = code.upper()
    if not olc.isValid(code):
        raise MalformedShortCode(f"Not a valid plus code: {code}")

    if not olc.isFull(code):
        if near is None:
            raise MalformedShortCode(f"Short plus code without a reference point: {code}")
        code = olc.recoverNearest(code, near.latitude, near.longitude)

    try:
        area = olc.decode(code)
    except ValueError as e:
        raise MalformedShortCode(str(e)) from e

    coordinate = Coordinate.from_values(area.latitudeCenter, area.longitudeCenter)
    if coordinate is None:
        raise MalformedShortCode(f"Plus code decoded outside valid range: {code}")
    return coordinate


def from_plus_code(reference: str, near: Optional[Coordinate] = None) -> Optional[Coordinate]:
    # "Hyrax+Hill" in a place URL looks like a plus code too; keep looking past it
    for match in _PLUS_CODE_RE.finditer(reference):
        try:
            return decode_plus_code(match.group(1), near=near)
        except MalformedShortCode as e:
            logger.debug("plus_code_decode_failed code=%s error=%s", match.group(1), e)
    return None


def build_strategies(near: Optional[Coordinate] = None) -> Tuple[Tuple[str, Strategy], ...]:
    """
    Ordered (name, strategy) pairs. First strategy that returns a Coordinate wins.
    `near` is only used to recover short plus codes.
    """
    return (
        ("at_sign", from_at_sign),
        ("query_param", from_query_param),
        ("plus_code", partial(from_plus_code, near=near)),
    )


DEFAULT_STRATEGIES = build_strategies()


def extract_with_strategy(
    reference: str,
    strategies: Tuple[Tuple[str, Strategy], ...] = DEFAULT_STRATEGIES,
) -> Optional[Tuple[str, Coordinate]]:
    """
    Run each strategy in order and return (strategy_name, coordinate) for the first hit.
    Returns None when nothing matched.
    """
    for name, strategy in strategies:
        coordinate = strategy(reference)
        if coordinate is not None:
            logger.debug("coordinate_extracted strategy=%s", name)
            return name, coordinate
    return None


def extract_coordinates(
    reference: str,
    strategies: Tuple[Tuple[str, Strategy], ...] = DEFAULT_STRATEGIES,
) -> Optional[Coordinate]:
    hit = extract_with_strategy(reference, strategies)
    return hit[1] if hit else None
