from fastapi import APIRouter, HTTPException, Query
from typing import List, Optional

from estimator.schemas.catalog import CatalogEntryOut, SchemeOut
from estimator.services.catalog import get_catalog
from estimator.services.rules import SCHEMES
from estimator.core.response_builders import (
    build_entry_response,
    build_entry_response_list,
    build_scheme_response,
)

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/services", response_model=List[CatalogEntryOut])
async def list_services(category: Optional[str] = Query(None)):
    services = get_catalog().services
    if category:
        services = [s for s in services if s.category == category]
    return build_entry_response_list(services)


@router.get("/categories", response_model=List[str])
async def list_categories():
    return get_catalog().categories()


@router.get("/services/{service_id}", response_model=CatalogEntryOut)
async def get_service(service_id: str):
    service = get_catalog().get_service(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service with id {service_id} not found")
    return build_entry_response(service)


@router.get("/packages", response_model=List[CatalogEntryOut])
async def list_packages():
    return build_entry_response_list(get_catalog().packages)


@router.get("/rules", response_model=List[SchemeOut])
async def list_rules():
    return [build_scheme_response(scheme) for scheme in SCHEMES.values()]
