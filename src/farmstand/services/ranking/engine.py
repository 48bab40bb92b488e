"""Geo ranking of catalog products for a shopper location."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Badge, DeliveryZone, PageKind, ProductRecord, ShopperLocation
from ...schemas.products import (
    DeliveryEligibility,
    PickupLocationDistance,
    PickupLocationModel,
    RankedProduct,
)
from ..geospatial import optional_distance_km
from .badges import BadgeFacts, calculate_badge, is_location_open
from .fulfillment import Fulfillment, resolve_fulfillment

logger = logging.getLogger(__name__)

TIER_AVAILABLE = 1
TIER_PRE_ORDER = 2
TIER_OTHER = 3

_AVAILABLE_BADGES = {Badge.AVAILABLE_NOW, Badge.AVAILABLE}


def _pickup_distances(fulfillment: Fulfillment, shopper: Optional[ShopperLocation]) -> list[PickupLocationDistance]:
    origin = shopper.coords if shopper else None
    entries = [
        PickupLocationDistance(
            location=PickupLocationModel(
                id=candidate.location.id,
                name=candidate.location.name,
                latitude=candidate.location.coordinate.lat if candidate.location.coordinate else None,
                longitude=candidate.location.coordinate.lng if candidate.location.coordinate else None,
                location_name=candidate.location.location_name or candidate.location.name,
            ),
            distance_km=optional_distance_km(origin, candidate.location.coordinate),
            is_primary=candidate.is_primary,
        )
        for candidate in fulfillment.pickup_locations
    ]
    # stable: equal distances keep listing order, so the primary stand stays ahead
    return sorted(entries, key=lambda entry: (entry.distance_km is None, entry.distance_km or 0.0))


def match_delivery_zone(zones: Sequence[DeliveryZone], zip_code: Optional[str]) -> Optional[DeliveryZone]:
    """First zone, in listing order, whose zip coverage contains ``zip_code``."""

    if not zip_code:
        return None
    for zone in zones:
        if zip_code in zone.zip_codes:
            return zone
    return None


def delivery_eligibility(
    fulfillment: Fulfillment, shopper: Optional[ShopperLocation]
) -> Optional[DeliveryEligibility]:
    if shopper is None or not shopper.zip_code:
        return None
    if not fulfillment.has_delivery:
        return None

    zone = match_delivery_zone(fulfillment.delivery_zones, shopper.zip_code)
    if zone is None:
        return DeliveryEligibility(is_eligible=False)
    return DeliveryEligibility(
        is_eligible=True,
        zone_id=zone.id,
        zone_name=zone.name,
        fee=zone.delivery_fee,
        minimum_order=zone.minimum_order,
        free_delivery_threshold=zone.free_delivery_threshold,
        delivery_days=list(zone.delivery_days),
    )


def _candidate_delivery_days(fulfillment: Fulfillment, eligibility: Optional[DeliveryEligibility]) -> list[str]:
    if eligibility is not None and eligibility.is_eligible:
        return eligibility.delivery_days
    days: list[str] = []
    for zone in fulfillment.delivery_zones:
        for day in zone.delivery_days:
            if day not in days:
                days.append(day)
    return days


def availability_tier(badge: Badge) -> int:
    if badge in _AVAILABLE_BADGES:
        return TIER_AVAILABLE
    if badge is Badge.PRE_ORDER:
        return TIER_PRE_ORDER
    return TIER_OTHER


def transform_product(
    product: ProductRecord,
    shopper: Optional[ShopperLocation],
    now: Optional[datetime] = None,
) -> RankedProduct:
    """Per-item transform: fulfillment, distances, delivery eligibility and badge."""

    now = now or datetime.now(timezone.utc)
    fulfillment = resolve_fulfillment(product)
    pickups = _pickup_distances(fulfillment, shopper)
    nearest = pickups[0].distance_km if pickups else None
    eligibility = delivery_eligibility(fulfillment, shopper)

    open_now = None
    if fulfillment.pickup_locations:
        nearest_id = pickups[0].location.id
        nearest_location = next(
            candidate.location for candidate in fulfillment.pickup_locations if candidate.location.id == nearest_id
        )
        open_now = is_location_open(nearest_location.hours, now)

    badge = calculate_badge(
        BadgeFacts(
            total_inventory=product.inventory,
            has_pickup_location=fulfillment.has_pickup,
            has_delivery=fulfillment.has_delivery,
            available_from=product.available_from,
            available_until=product.available_until,
            inventory_updated_at=product.inventory_updated_at or product.updated_at,
            updated_at=product.updated_at,
            is_pickup_location_open_now=open_now,
            delivery_days=_candidate_delivery_days(fulfillment, eligibility),
        ),
        now=now,
    )

    return RankedProduct(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        images=list(product.images),
        inventory=product.inventory,
        is_active=product.is_active,
        status=getattr(product.status, "value", str(product.status)),
        tags=list(product.tags),
        delivery_available=product.delivery_available,
        available_from=product.available_from,
        available_until=product.available_until,
        created_at=product.created_at,
        updated_at=product.updated_at,
        nearest_pickup_distance_km=nearest,
        all_pickup_locations=pickups,
        delivery_eligibility=eligibility,
        availability_badge=badge,
        availability_tier=availability_tier(badge),
    )


def _updated_at_key(product: RankedProduct) -> float:
    updated = product.updated_at
    if updated.tzinfo is None:
        updated = updated.replace(tzinfo=timezone.utc)
    return updated.timestamp()


def sort_ranked(products: Sequence[RankedProduct], has_location: bool) -> list[RankedProduct]:
    """Order by availability tier, then distance (with a location) or recency (without).

    ``sorted`` is stable, so products that tie on every key keep their input order.
    """
    if has_location:
        return sorted(
            products,
            key=lambda p: (
                p.availability_tier,
                p.nearest_pickup_distance_km is None,
                p.nearest_pickup_distance_km or 0.0,
            ),
        )
    return sorted(products, key=lambda p: (p.availability_tier, -_updated_at_key(p)))


def local_radius_km(shopper: ShopperLocation) -> float:
    # zip-derived locations are less precise, so they get the wider radius
    if shopper.source == "zipcode":
        return settings.zipcode_radius_km
    return settings.browser_radius_km


def is_local(product: RankedProduct, radius_km: float) -> bool:
    distance = product.nearest_pickup_distance_km
    if distance is not None and distance <= radius_km:
        return True
    eligibility = product.delivery_eligibility
    return bool(eligibility and eligibility.is_eligible)


def partition_by_radius(
    products: Sequence[RankedProduct], radius_km: float
) -> tuple[list[RankedProduct], list[RankedProduct]]:
    local: list[RankedProduct] = []
    exploratory: list[RankedProduct] = []
    for product in products:
        (local if is_local(product, radius_km) else exploratory).append(product)
    return local, exploratory


def rank_products(
    products: Sequence[ProductRecord],
    shopper: Optional[ShopperLocation],
    page_kind: PageKind = "initial",
    now: Optional[datetime] = None,
) -> list[RankedProduct]:
    """Rank a product batch for a shopper and apply the local/exploratory page policy."""

    if not products:
        return []

    now = now or datetime.now(timezone.utc)
    ranked = sort_ranked([transform_product(product, shopper, now) for product in products], shopper is not None)
    if shopper is None:
        return ranked

    local, exploratory = partition_by_radius(ranked, local_radius_km(shopper))
    logger.debug(f"Ranked {len(ranked)} products: {len(local)} local, {len(exploratory)} exploratory")

    if page_kind == "continuation":
        return exploratory
    if len(local) < settings.min_local_results:
        return local + exploratory
    return local
