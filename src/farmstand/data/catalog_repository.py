"""Product catalog reader backed by Supabase."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..db.supabase import get_supabase_client
from ..models.domain import (
    Coordinate,
    DeliveryListing,
    DeliveryType,
    DeliveryZone,
    Farm,
    PickupLocation,
    ProductFilter,
    ProductRecord,
    ProductStatus,
    StandListing,
)

logger = logging.getLogger(__name__)

_STAND_COLUMNS = "id, name, latitude, longitude, location_name, is_active, hours, description, tags, images"
_ZONE_COLUMNS = (
    "id, name, is_active, zip_codes, cities, states, delivery_days, delivery_fee, "
    "free_delivery_threshold, minimum_order, scheduled_dates, delivery_time_windows"
)
PRODUCT_SELECT = (
    "*, "
    f"market_stand:market_stands({_STAND_COLUMNS}), "
    f"stand_listings(is_active, market_stand:market_stands({_STAND_COLUMNS})), "
    f"delivery_zone:delivery_zones({_ZONE_COLUMNS}), "
    f"delivery_listings(day_of_week, inventory, delivery_zone:delivery_zones({_ZONE_COLUMNS}))"
)


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", ""))
    except ValueError:
        return None


def _coerce_int(value: Any, default: int = 0) -> int:
    number = _coerce_float(value)
    return int(round(number)) if number is not None else default


def _optional_int(value: Any) -> Optional[int]:
    number = _coerce_float(value)
    return int(round(number)) if number is not None else None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp '{value}'")
        return None


def _parse_date(value: Any) -> Optional[date]:
    parsed = _parse_datetime(value)
    return parsed.date() if parsed else None


def parse_coordinate(lat: Any, lng: Any) -> Optional[Coordinate]:
    lat_value = _coerce_float(lat)
    lng_value = _coerce_float(lng)
    if lat_value is None or lng_value is None:
        return None
    if not (-90.0 <= lat_value <= 90.0 and -180.0 <= lng_value <= 180.0):
        return None
    return Coordinate(lat=lat_value, lng=lng_value)


def parse_pickup_location(row: Any) -> Optional[PickupLocation]:
    if not isinstance(row, dict) or not row.get("id"):
        return None
    return PickupLocation(
        id=str(row["id"]),
        name=(row.get("name") or "").strip(),
        coordinate=parse_coordinate(row.get("latitude"), row.get("longitude")),
        location_name=(row.get("location_name") or "").strip(),
        is_active=bool(row.get("is_active", True)),
        hours=row.get("hours") if isinstance(row.get("hours"), dict) else None,
        description=row.get("description"),
        tags=list(row.get("tags") or []),
        images=list(row.get("images") or []),
    )


def parse_delivery_zone(row: Any) -> Optional[DeliveryZone]:
    if not isinstance(row, dict) or not row.get("id"):
        return None
    if not row.get("is_active", True):
        return None
    scheduled = tuple(d for d in (_parse_date(v) for v in row.get("scheduled_dates") or []) if d is not None)
    windows = row.get("delivery_time_windows")
    return DeliveryZone(
        id=str(row["id"]),
        name=(row.get("name") or "").strip(),
        is_active=True,
        zip_codes=frozenset(str(z).strip() for z in row.get("zip_codes") or []),
        cities=tuple(row.get("cities") or ()),
        states=tuple(row.get("states") or ()),
        delivery_days=tuple(row.get("delivery_days") or ()),
        delivery_fee=_coerce_int(row.get("delivery_fee")),
        free_delivery_threshold=_optional_int(row.get("free_delivery_threshold")),
        minimum_order=_optional_int(row.get("minimum_order")),
        scheduled_dates=scheduled,
        delivery_time_windows=dict(windows) if isinstance(windows, dict) else {},
    )


def parse_product(row: dict) -> ProductRecord:
    """Build a product from a catalog row with nested relations.

    Missing or malformed relations become empty; a row without an id, name,
    price or timestamps raises ``KeyError``/``ValueError``.
    """
    created_at = _parse_datetime(row["created_at"])
    updated_at = _parse_datetime(row.get("updated_at")) or created_at
    if created_at is None:
        raise ValueError(f"Product '{row.get('id')}' has no creation timestamp")

    price = _coerce_float(row["price"])
    if price is None:
        raise ValueError(f"Product '{row.get('id')}' has no price")

    stand_listings = [
        StandListing(location=parse_pickup_location(listing.get("market_stand")), is_active=bool(listing.get("is_active")))
        for listing in row.get("stand_listings") or []
        if isinstance(listing, dict)
    ]
    delivery_listings = [
        DeliveryListing(
            zone=parse_delivery_zone(listing.get("delivery_zone")),
            day_of_week=listing.get("day_of_week"),
            inventory=_optional_int(listing.get("inventory")),
        )
        for listing in row.get("delivery_listings") or []
        if isinstance(listing, dict)
    ]

    delivery_type = row.get("delivery_type")
    return ProductRecord(
        id=str(row["id"]),
        name=str(row["name"]).strip(),
        price=int(round(price)),
        created_at=created_at,
        updated_at=updated_at,
        description=row.get("description"),
        images=list(row.get("images") or []),
        inventory=_coerce_int(row.get("inventory")),
        is_active=bool(row.get("is_active", True)),
        status=ProductStatus(row.get("status") or ProductStatus.APPROVED.value),
        tags=list(row.get("tags") or []),
        available_from=_parse_datetime(row.get("available_date") or row.get("available_from")),
        available_until=_parse_datetime(row.get("available_until")),
        inventory_updated_at=_parse_datetime(row.get("inventory_updated_at")),
        delivery_available=bool(row.get("delivery_available")),
        delivery_type=DeliveryType(delivery_type) if delivery_type else None,
        delivery_dates=tuple(d for d in (_parse_datetime(v) for v in row.get("delivery_dates") or []) if d),
        pickup_location=parse_pickup_location(row.get("market_stand")),
        stand_listings=stand_listings,
        delivery_zone=parse_delivery_zone(row.get("delivery_zone")),
        delivery_listings=delivery_listings,
    )


def parse_farm(row: Any) -> Optional[Farm]:
    if not isinstance(row, dict) or not row.get("id"):
        return None
    return Farm(
        id=str(row["id"]),
        name=(row.get("name") or "").strip(),
        coordinate=parse_coordinate(row.get("latitude"), row.get("longitude")),
        location_name=(row.get("location_name") or "").strip(),
        description=row.get("description"),
        tagline=row.get("tagline"),
        slug=row.get("slug"),
        images=list(row.get("images") or []),
    )


def _parse_products(rows: Sequence[dict]) -> list[ProductRecord]:
    products: list[ProductRecord] = []
    for row in rows:
        try:
            products.append(parse_product(row))
        except (KeyError, ValueError, TypeError, AttributeError, OverflowError) as e:
            # Skip invalid rows but continue processing
            logger.warning(f"Skipping invalid product row: {e}")
            continue
    return products


class SupabaseCatalogReader:
    """Catalog reader over the Supabase REST API.

    The Supabase client is synchronous, so each query runs in a worker thread.
    Errors propagate; callers decide how to degrade.
    """

    def __init__(self, client=None) -> None:
        self._client = client

    @property
    def client(self):
        client = self._client or get_supabase_client()
        if client is None:
            raise ConnectionError("Supabase is not configured (missing URL or key).")
        return client

    async def find_active_products(self, filter: ProductFilter) -> list[ProductRecord]:
        query = (
            self.client.table("products")
            .select(PRODUCT_SELECT)
            .eq("is_active", filter.is_active)
            .eq("status", filter.status.value)
        )
        if filter.market_stand_id:
            query = query.eq("market_stand_id", filter.market_stand_id)
        if filter.cursor:
            # cursor is the created_at of the last product already served
            query = query.lt("created_at", filter.cursor)
        query = query.order("created_at", desc=True).limit(filter.limit)

        response = await asyncio.to_thread(query.execute)
        return _parse_products(response.data or [])

    async def get_product(self, product_id: str) -> Optional[ProductRecord]:
        query = self.client.table("products").select(PRODUCT_SELECT).eq("id", product_id).limit(1)
        response = await asyncio.to_thread(query.execute)
        products = _parse_products(response.data or [])
        return products[0] if products else None

    async def find_active_pickup_locations(self) -> list[PickupLocation]:
        query = (
            self.client.table("market_stands")
            .select(_STAND_COLUMNS)
            .eq("is_active", True)
            .eq("status", ProductStatus.APPROVED.value)
        )
        response = await asyncio.to_thread(query.execute)
        locations = (parse_pickup_location(row) for row in response.data or [])
        return [location for location in locations if location is not None]

    async def find_active_farms(self) -> list[Farm]:
        query = (
            self.client.table("locals")
            .select("id, name, description, tagline, slug, latitude, longitude, location_name, images")
            .eq("is_active", True)
            .eq("status", ProductStatus.APPROVED.value)
        )
        response = await asyncio.to_thread(query.execute)
        farms = (parse_farm(row) for row in response.data or [])
        return [farm for farm in farms if farm is not None]
