"""Home page product listing: geo query, cached snapshot and simple-query fallback."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence

from pydantic import ValidationError

from ...config import settings
from ...data.base import Cache, CatalogReader
from ...models.domain import PageKind, ProductFilter, ShopperLocation
from ...schemas.products import RankedProduct, RankedProductList
from .engine import rank_products

logger = logging.getLogger(__name__)

# Detached refresh writes are held here until they finish so they are not garbage collected.
_background_tasks: set[asyncio.Task] = set()


async def read_static_snapshot(cache: Optional[Cache]) -> Optional[list[RankedProduct]]:
    """Cached home products, or None on a miss, an empty value, a timeout or any cache fault."""

    if cache is None:
        return None
    key = settings.static_cache_key
    try:
        payload = await asyncio.wait_for(cache.get(key), timeout=settings.cache_read_timeout_seconds)
    except asyncio.TimeoutError:
        logger.debug(f"Cache read for {key} timed out after {settings.cache_read_timeout_seconds}s")
        return None
    except Exception as e:
        logger.warning(f"Cache read for {key} failed: {e}")
        return None

    if not payload:
        logger.debug(f"Cache miss for {key}")
        return None
    try:
        products = RankedProductList.validate_json(payload)
    except ValidationError as e:
        logger.warning(f"Discarding unreadable snapshot under {key}: {e}")
        return None
    return products or None


async def write_static_snapshot(cache: Cache, products: Sequence[RankedProduct]) -> bool:
    key = settings.static_cache_key
    try:
        await cache.set_with_ttl(key, RankedProductList.dump_json(list(products)), settings.static_cache_ttl_seconds)
    except Exception as e:
        logger.warning(f"Cache write for {key} failed: {e}")
        return False
    logger.info(f"Refreshed {key} with {len(products)} products")
    return True


def schedule_snapshot_refresh(cache: Cache, products: Sequence[RankedProduct]) -> asyncio.Task:
    """Write the snapshot in the background; the caller never awaits the result."""

    task = asyncio.create_task(write_static_snapshot(cache, products))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def _query_recent_products(catalog: CatalogReader, now: Optional[datetime]) -> list[RankedProduct]:
    products = await asyncio.wait_for(
        catalog.find_active_products(ProductFilter(limit=settings.home_page_size)),
        timeout=settings.catalog_timeout_seconds,
    )
    # no shopper: the snapshot is shared by every visitor
    return rank_products(products, None, "initial", now)


async def get_ranked_home_products(
    catalog: CatalogReader,
    cache: Optional[Cache],
    now: Optional[datetime] = None,
) -> list[RankedProduct]:
    """Zero-personalization home products.

    Serves the cached snapshot when present. On a miss runs one simple catalog
    query, returns its ranking and refreshes the snapshot in the background.
    """
    cached = await read_static_snapshot(cache)
    if cached:
        return cached

    try:
        ranked = await _query_recent_products(catalog, now)
    except Exception as e:
        logger.warning(f"Simple home products query failed: {e}")
        return []

    if cache is not None and ranked:
        schedule_snapshot_refresh(cache, ranked)
    return ranked


async def get_home_products(
    shopper: Optional[ShopperLocation],
    page_kind: PageKind,
    catalog: CatalogReader,
    cache: Optional[Cache],
    cursor: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[RankedProduct]:
    """Home products for a shopper, or the shared snapshot for anonymous browsing."""

    if shopper is None:
        return await get_ranked_home_products(catalog, cache, now)

    try:
        products = await asyncio.wait_for(
            catalog.find_active_products(ProductFilter(limit=settings.geo_batch_size, cursor=cursor)),
            timeout=settings.catalog_timeout_seconds,
        )
    except Exception as e:
        logger.warning(f"Geo home products query failed (source={shopper.source}): {e}")
        products = []

    if products:
        return rank_products(products, shopper, page_kind, now)
    if page_kind == "continuation":
        return []

    logger.info("Geo home products unavailable; falling back to static home products")
    return await get_ranked_home_products(catalog, cache, now)


async def refresh_static_products_cache(catalog: CatalogReader, cache: Optional[Cache]) -> bool:
    """Rebuild the static snapshot now. Used by the warm-up endpoint."""

    if cache is None:
        return False
    try:
        ranked = await _query_recent_products(catalog, None)
    except Exception as e:
        logger.warning(f"Error refreshing static products cache: {e}")
        return False
    return await write_static_snapshot(cache, ranked)


async def invalidate_product_caches(cache: Optional[Cache]) -> int:
    """Drop the static snapshot so the next home request rebuilds it. Returns the number of keys removed."""

    if cache is None:
        return 0
    try:
        return await cache.delete_pattern(settings.static_cache_key)
    except Exception as e:
        logger.warning(f"Cache invalidation for {settings.static_cache_key} failed: {e}")
        return 0
