"""Health endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, status

from ...data.base import Cache
from ..dependencies import get_cache

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
async def check_database() -> dict:
    """Check the catalog database connection."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set FARMSTAND_SUPABASE_URL and FARMSTAND_SUPABASE_KEY environment variables.",
        }

    try:
        query = supabase.table("products").select("id", count="exact").limit(1)
        response = await asyncio.to_thread(query.execute)
        return {
            "configured": True,
            "connected": True,
            "products_count": response.count,
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }


@router.get("/health/cache", status_code=status.HTTP_200_OK)
async def check_cache(cache: Cache | None = Depends(get_cache)) -> dict:
    """Check the Redis snapshot cache."""
    if cache is None:
        return {"configured": False, "message": "Redis not configured. Set FARMSTAND_REDIS_URL."}
    try:
        return {"configured": True, "healthy": await cache.ping()}
    except Exception as exc:
        return {"configured": True, "healthy": False, "error": str(exc)}
