"""
Health check endpoint. This is a simple endpoint that can be used to check if the server is running and responsive.
"""
from fastapi import APIRouter, Depends

from makazi.dependencies import get_catalog
from makazi.services.catalog import Catalog

router = APIRouter(prefix="/health", tags=["health"])

@router.get("")
def health_check(catalog: Catalog = Depends(get_catalog)):
    return {"status": "ok", "catalog_size": len(catalog)}
