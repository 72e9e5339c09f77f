"""
Short link expansion. The client calls this before /find-nearby when the user pastes a maps.app.goo.gl link.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from makazi.dependencies import get_http_client
from makazi.services.link_expander import LinkExpandError, expand_link, is_http_url

router = APIRouter(tags=["nearby"])
logger = logging.getLogger(__name__)


@router.get("/expand")
async def expand(
    url: Optional[str] = Query(None, description="Shortened map link"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    if not url or not is_http_url(url.strip()):
        return JSONResponse(status_code=400, content={"error": "missing url"})

    try:
        full_url = await expand_link(client, url)
    except LinkExpandError as e:
        logger.warning("expand_failed error=%s", str(e))
        return JSONResponse(status_code=e.status_code, content={"error": "failed to expand"})

    return {"full_url": full_url}
