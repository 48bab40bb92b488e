"""Global search across products, pickup locations and farms near a zip code."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...data.base import CatalogReader, Geocoder
from ...data.geocoder import is_valid_zip_code
from ...models.domain import Coordinate, Farm, PickupLocation, ProductFilter, ShopperLocation
from ...schemas.products import RankedProduct
from ...schemas.search import FarmResult, GlobalSearchResult, PickupLocationResult, SearchLocation
from ..geospatial import distance_km
from ..ranking.engine import is_local, sort_ranked, transform_product

logger = logging.getLogger(__name__)


def _matches(query: str, *fields: Optional[str], tags: Iterable[str] = ()) -> bool:
    if any(value and query in value.lower() for value in fields):
        return True
    return any(query in tag.lower() for tag in tags)


def filter_products(products: Sequence[RankedProduct], query: str) -> list[RankedProduct]:
    return [
        product
        for product in products
        if _matches(
            query,
            product.name,
            product.description,
            product.nearest_pickup_location.name if product.nearest_pickup_location else None,
            tags=product.tags,
        )
    ]


def filter_pickup_locations(locations: Sequence[PickupLocationResult], query: str) -> list[PickupLocationResult]:
    return [
        location
        for location in locations
        if _matches(query, location.name, location.description, location.location_name, tags=location.tags)
    ]


def filter_farms(farms: Sequence[FarmResult], query: str) -> list[FarmResult]:
    return [farm for farm in farms if _matches(query, farm.name, farm.description, farm.tagline, farm.location_name)]


def _pickup_location_results(
    locations: Sequence[PickupLocation], origin: Coordinate, radius_km: float
) -> list[PickupLocationResult]:
    results: list[PickupLocationResult] = []
    for location in locations:
        if location.coordinate is None:
            continue
        distance = distance_km(origin, location.coordinate)
        if distance > radius_km:
            continue
        results.append(
            PickupLocationResult(
                id=location.id,
                name=location.name,
                description=location.description,
                latitude=location.coordinate.lat,
                longitude=location.coordinate.lng,
                location_name=location.location_name,
                images=list(location.images),
                tags=list(location.tags),
                distance_km=distance,
                href=f"/market-stand/{location.id}",
            )
        )
    results.sort(key=lambda result: result.distance_km)
    return results


def _farm_results(farms: Sequence[Farm], origin: Coordinate, radius_km: float) -> list[FarmResult]:
    results: list[FarmResult] = []
    for farm in farms:
        if farm.coordinate is None:
            continue
        distance = distance_km(origin, farm.coordinate)
        if distance > radius_km:
            continue
        results.append(
            FarmResult(
                id=farm.id,
                name=farm.name,
                description=farm.tagline or farm.description,
                tagline=farm.tagline,
                slug=farm.slug,
                latitude=farm.coordinate.lat,
                longitude=farm.coordinate.lng,
                location_name=farm.location_name,
                images=list(farm.images),
                distance_km=distance,
                href=f"/local/{farm.slug or farm.id}",
            )
        )
    results.sort(key=lambda result: result.distance_km)
    return results


async def search(
    zip_code: str,
    text_query: Optional[str],
    catalog: CatalogReader,
    geocoder: Geocoder,
    now: Optional[datetime] = None,
) -> GlobalSearchResult:
    """Products, pickup locations and farms within the search radius of ``zip_code``.

    Each kind is sorted independently; the optional text filter runs last and
    keeps that order. Validation, geocoding and catalog failures all produce
    an empty result with no location.
    """
    if not is_valid_zip_code(zip_code):
        return GlobalSearchResult.empty()
    zip_code = zip_code.strip()

    try:
        origin = await geocoder.geocode(zip_code)
    except Exception as e:
        logger.warning(f"Geocoding zip {zip_code} for search failed: {e}")
        return GlobalSearchResult.empty()
    if origin is None:
        return GlobalSearchResult.empty()

    radius_km = settings.search_radius_km
    try:
        products, locations, farms = await asyncio.wait_for(
            asyncio.gather(
                catalog.find_active_products(ProductFilter(limit=settings.search_batch_size)),
                catalog.find_active_pickup_locations(),
                catalog.find_active_farms(),
            ),
            timeout=settings.catalog_timeout_seconds,
        )
    except Exception as e:
        logger.warning(f"Failed to perform global search for zip {zip_code}: {e}")
        return GlobalSearchResult.empty()

    now = now or datetime.now(timezone.utc)
    shopper = ShopperLocation(coords=origin, source="zipcode", zip_code=zip_code)
    ranked = [transform_product(product, shopper, now) for product in products]
    product_results = sort_ranked([p for p in ranked if is_local(p, radius_km)], has_location=True)
    location_results = _pickup_location_results(locations, origin, radius_km)
    farm_results = _farm_results(farms, origin, radius_km)

    query = (text_query or "").strip().lower()
    if query:
        product_results = filter_products(product_results, query)
        location_results = filter_pickup_locations(location_results, query)
        farm_results = filter_farms(farm_results, query)

    return GlobalSearchResult(
        products=product_results,
        pickup_locations=location_results,
        farms=farm_results,
        location=SearchLocation(lat=origin.lat, lng=origin.lng, zip_code=zip_code),
    )
