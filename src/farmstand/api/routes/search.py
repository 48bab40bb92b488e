"""Global search endpoint."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...data.base import CatalogReader, Geocoder
from ...schemas.search import GlobalSearchResult
from ...services.search.service import search
from ..dependencies import get_catalog, get_geocoder

router = APIRouter(tags=["search"])


@router.get("/search", response_model=GlobalSearchResult, status_code=status.HTTP_200_OK)
async def global_search(
    zip_code: str = Query(..., description="Zip code to search near"),
    q: Optional[str] = Query(default=None, description="Optional text filter"),
    catalog: CatalogReader = Depends(get_catalog),
    geocoder: Geocoder = Depends(get_geocoder),
) -> GlobalSearchResult:
    return await search(zip_code, q, catalog, geocoder)
