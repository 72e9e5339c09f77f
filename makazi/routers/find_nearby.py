"""
Nearby search: paste a map link (or plus code), get the known listings within walking distance.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from makazi.dependencies import get_resolver
from makazi.services.location_errors import LocationResolutionError, NoCoordinateFound
from makazi.services.location_resolver import LocationResolver

router = APIRouter(tags=["nearby"])
logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.25


class FindNearbyRequest(BaseModel):
    # "url" is what the web client has always sent
    location_reference: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("location_reference", "url"),
        description="Map link (.../@lat,lng, ...?q=lat,lng, .../place/<name>) or plus code",
    )


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event) -> None:
    # Client went away -> abort the in-flight geocode call
    while not cancel_event.is_set():
        if await request.is_disconnected():
            cancel_event.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/find-nearby")
async def find_nearby(
    payload: FindNearbyRequest,
    request: Request,
    response: Response,
    resolver: LocationResolver = Depends(get_resolver),
):
    req_start = time.perf_counter()
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))

    try:
        resolution = await resolver.resolve(payload.location_reference, cancel_event=cancel_event)
    except NoCoordinateFound as e:
        logger.info("find_nearby_unresolved reason=%s", e.reason)
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message})
    except LocationResolutionError as e:
        logger.info("find_nearby_rejected error=%s", type(e).__name__)
        return JSONResponse(status_code=e.status_code, content={"error": e.public_message})
    except Exception:
        logger.exception("find_nearby_failed")
        return JSONResponse(status_code=500, content={"error": "internal server error"})
    finally:
        watcher.cancel()

    total_ms = round((time.perf_counter() - req_start) * 1000, 2)
    response.headers["X-Total-Ms"] = str(total_ms)
    response.headers["X-Strategy"] = resolution.strategy

    logger.info(
        "find_nearby_done strategy=%s nearby=%d total_ms=%.2f",
        resolution.strategy,
        len(resolution.nearby),
        total_ms,
    )
    return resolution.to_dict()
