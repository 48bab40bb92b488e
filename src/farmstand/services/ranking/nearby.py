"""Closest products to a reference point, e.g. the product currently being viewed."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from ...config import settings
from ...data.base import CatalogReader
from ...models.domain import Coordinate, ProductFilter, ShopperLocation
from ...schemas.products import RankedProduct
from .engine import transform_product

logger = logging.getLogger(__name__)


async def get_nearby_products(
    exclude_product_id: str,
    reference: Coordinate,
    catalog: CatalogReader,
    now: Optional[datetime] = None,
) -> list[RankedProduct]:
    """Top products by distance from ``reference``, without radius partitioning."""

    try:
        products = await asyncio.wait_for(
            catalog.find_active_products(ProductFilter(limit=settings.geo_batch_size)),
            timeout=settings.catalog_timeout_seconds,
        )
    except Exception as e:
        logger.warning(f"Failed to fetch nearby products for {exclude_product_id}: {e}")
        return []

    now = now or datetime.now(timezone.utc)
    origin = ShopperLocation(coords=reference, source="browser")
    ranked = [
        transform_product(product, origin, now)
        for product in products
        if product.id != exclude_product_id
    ]
    with_distance = [product for product in ranked if product.nearest_pickup_distance_km is not None]
    with_distance.sort(key=lambda product: product.nearest_pickup_distance_km)
    return with_distance[: settings.nearby_limit]
