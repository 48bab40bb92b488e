"""Product listing endpoints."""

from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from ...data.base import Cache, CatalogReader
from ...models.domain import Coordinate
from ...schemas.delivery import DeliveryEligibilityResult
from ...schemas.products import RankedProduct, ShopperLocationQuery
from ...services.delivery.eligibility import check_delivery_eligibility
from ...services.ranking.home import get_home_products
from ...services.ranking.nearby import get_nearby_products
from ..dependencies import get_cache, get_catalog

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/home", response_model=List[RankedProduct], status_code=status.HTTP_200_OK)
async def list_home_products(
    lat: Optional[float] = Query(default=None, ge=-90.0, le=90.0),
    lng: Optional[float] = Query(default=None, ge=-180.0, le=180.0),
    source: Literal["browser", "zipcode"] = Query(default="browser"),
    zip_code: Optional[str] = Query(default=None, description="5-digit zip code for delivery matching"),
    accuracy: Optional[float] = Query(default=None, ge=0.0),
    page_kind: Literal["initial", "continuation"] = Query(default="initial"),
    cursor: Optional[str] = Query(default=None, description="created_at of the last product already shown"),
    catalog: CatalogReader = Depends(get_catalog),
    cache: Cache | None = Depends(get_cache),
) -> List[RankedProduct]:
    try:
        location = ShopperLocationQuery(lat=lat, lng=lng, source=source, zip_code=zip_code, accuracy=accuracy)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    return await get_home_products(location.to_domain(), page_kind, catalog, cache, cursor=cursor)


@router.get("/{product_id}/nearby", response_model=List[RankedProduct], status_code=status.HTTP_200_OK)
async def list_nearby_products(
    product_id: str,
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    catalog: CatalogReader = Depends(get_catalog),
) -> List[RankedProduct]:
    return await get_nearby_products(product_id, Coordinate(lat=lat, lng=lng), catalog)


@router.get(
    "/{product_id}/delivery-eligibility",
    response_model=DeliveryEligibilityResult,
    status_code=status.HTTP_200_OK,
)
async def get_delivery_eligibility(
    product_id: str,
    zip_code: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    catalog: CatalogReader = Depends(get_catalog),
) -> DeliveryEligibilityResult:
    return await check_delivery_eligibility(product_id, catalog, zip_code=zip_code, city=city, state=state)
