"""Snapshot cache maintenance endpoints (warm-up cron, invalidation after catalog edits)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...data.base import Cache, CatalogReader
from ...services.ranking.home import invalidate_product_caches, refresh_static_products_cache
from ..dependencies import get_cache, get_catalog

router = APIRouter(prefix="/cache", tags=["cache"])


@router.post("/warm", status_code=status.HTTP_200_OK)
async def warm_static_products(
    catalog: CatalogReader = Depends(get_catalog),
    cache: Cache | None = Depends(get_cache),
) -> dict:
    if cache is None:
        return {"refreshed": False, "message": "Redis not configured. Set FARMSTAND_REDIS_URL."}
    refreshed = await refresh_static_products_cache(catalog, cache)
    return {"refreshed": refreshed}


@router.post("/invalidate", status_code=status.HTTP_200_OK)
async def invalidate_products(cache: Cache | None = Depends(get_cache)) -> dict:
    removed = await invalidate_product_caches(cache)
    return {"removed": removed}
