"""
FastAPI dependencies. Objects are built once in the app lifespan and kept on app.state,
so tests can swap them with app.dependency_overrides.
"""
import httpx
from fastapi import Request

from makazi.services.catalog import Catalog
from makazi.services.location_resolver import LocationResolver


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def get_resolver(request: Request) -> LocationResolver:
    return request.app.state.resolver
