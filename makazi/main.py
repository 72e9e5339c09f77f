import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from makazi.config import CATALOG_DB_PATH, CORS_ALLOW_ORIGINS, LOG_FORMAT, LOG_LEVEL, NEARBY_RADIUS_KM
from makazi.routers import expand, find_nearby, health
from makazi.services.catalog import load_catalog
from makazi.services.geocoding import NominatimGeocoder
from makazi.services.link_expander import MAX_REDIRECTS
from makazi.services.location_resolver import LocationResolver
from makazi.services.proximity import ProximityFilter

logging.basicConfig(level=LOG_LEVEL.upper(), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Catalog is read once; it is never written while the process runs
    catalog = load_catalog(CATALOG_DB_PATH)
    async with httpx.AsyncClient(max_redirects=MAX_REDIRECTS) as http_client:
        app.state.http_client = http_client
        app.state.catalog = catalog
        app.state.resolver = LocationResolver(
            catalog=catalog,
            geocoder=NominatimGeocoder(http_client),
            proximity=ProximityFilter(radius_km=NEARBY_RADIUS_KM),
        )
        logger.info("app_started catalog_size=%d radius_km=%s", len(catalog), NEARBY_RADIUS_KM)
        yield


app = FastAPI(title="Makazi API", lifespan=lifespan)

# Add CORS middleware to allow frontend requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods
    allow_headers=["*"],  # Allows all headers
    expose_headers=["X-Total-Ms", "X-Strategy"],
)


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    logger.info("invalid_request path=%s errors=%d", request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "invalid request"})


app.include_router(health.router) # health check endpoint (GET /health)
app.include_router(find_nearby.router) # nearby search, takes a map link / plus code and returns listings within the radius (POST /find-nearby)
app.include_router(expand.router) # short link expansion (GET /expand?url=...)
