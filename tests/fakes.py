"""In-memory collaborators and record builders shared by the tests."""

from __future__ import annotations

import asyncio
import fnmatch
import math
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from farmstand.models.domain import (
    Coordinate,
    DeliveryListing,
    DeliveryZone,
    Farm,
    PickupLocation,
    ProductFilter,
    ProductRecord,
    StandListing,
)

# Wednesday afternoon
NOW = datetime(2026, 10, 14, 15, 0, tzinfo=timezone.utc)
ORIGIN = Coordinate(lat=40.0, lng=-75.0)


def north_of(origin: Coordinate, km: float) -> Coordinate:
    """Point exactly ``km`` kilometres due north of ``origin``."""
    return Coordinate(lat=origin.lat + math.degrees(km / 6371.0), lng=origin.lng)


def make_location(location_id: str, coordinate: Optional[Coordinate], name: str | None = None, **kwargs) -> PickupLocation:
    return PickupLocation(
        id=location_id,
        name=name or f"Stand {location_id}",
        coordinate=coordinate,
        location_name=kwargs.pop("location_name", f"Market {location_id}"),
        **kwargs,
    )


def make_zone(zone_id: str, zip_codes: Sequence[str] = (), fee: int = 500, **kwargs) -> DeliveryZone:
    return DeliveryZone(
        id=zone_id,
        name=kwargs.pop("name", f"Zone {zone_id}"),
        zip_codes=frozenset(zip_codes),
        delivery_fee=fee,
        **kwargs,
    )


def make_product(
    product_id: str,
    *,
    location: Optional[PickupLocation] = None,
    km: Optional[float] = None,
    stand_listings: Sequence[StandListing] = (),
    zone: Optional[DeliveryZone] = None,
    delivery_listings: Sequence[DeliveryListing] = (),
    delivery_available: Optional[bool] = None,
    updated_at: Optional[datetime] = None,
    **kwargs,
) -> ProductRecord:
    """Product record; ``km`` places a primary stand that far north of ORIGIN."""
    if location is None and km is not None:
        location = make_location(f"S-{product_id}", north_of(ORIGIN, km))
    created = kwargs.pop("created_at", NOW - timedelta(days=7))
    return ProductRecord(
        id=product_id,
        name=kwargs.pop("name", f"Product {product_id}"),
        price=kwargs.pop("price", 450),
        created_at=created,
        updated_at=updated_at or NOW - timedelta(days=1),
        inventory=kwargs.pop("inventory", 10),
        pickup_location=location,
        stand_listings=list(stand_listings),
        delivery_zone=zone,
        delivery_listings=list(delivery_listings),
        delivery_available=zone is not None if delivery_available is None else delivery_available,
        **kwargs,
    )


def make_farm(farm_id: str, coordinate: Optional[Coordinate], **kwargs) -> Farm:
    return Farm(
        id=farm_id,
        name=kwargs.pop("name", f"Farm {farm_id}"),
        coordinate=coordinate,
        location_name=kwargs.pop("location_name", "Valley"),
        **kwargs,
    )


class FakeCatalog:
    def __init__(
        self,
        products: Sequence[ProductRecord] = (),
        pickup_locations: Sequence[PickupLocation] = (),
        farms: Sequence[Farm] = (),
        error: Exception | None = None,
    ) -> None:
        self.products = list(products)
        self.pickup_locations = list(pickup_locations)
        self.farms = list(farms)
        self.error = error
        self.filters: list[ProductFilter] = []

    @property
    def product_calls(self) -> int:
        return len(self.filters)

    async def find_active_products(self, filter: ProductFilter) -> list[ProductRecord]:
        self.filters.append(filter)
        if self.error:
            raise self.error
        return self.products[: filter.limit]

    async def find_active_pickup_locations(self) -> list[PickupLocation]:
        if self.error:
            raise self.error
        return self.pickup_locations

    async def find_active_farms(self) -> list[Farm]:
        if self.error:
            raise self.error
        return self.farms

    async def get_product(self, product_id: str) -> Optional[ProductRecord]:
        if self.error:
            raise self.error
        return next((p for p in self.products if p.id == product_id), None)


class FakeCache:
    def __init__(
        self,
        store: dict[str, bytes] | None = None,
        get_error: Exception | None = None,
        set_error: Exception | None = None,
        get_delay: float = 0.0,
    ) -> None:
        self.store = dict(store or {})
        self.get_error = get_error
        self.set_error = set_error
        self.get_delay = get_delay
        self.get_calls: list[str] = []
        self.set_calls: list[tuple[str, bytes, int]] = []

    async def get(self, key: str) -> Optional[bytes]:
        self.get_calls.append(key)
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        if self.get_error:
            raise self.get_error
        return self.store.get(key)

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self.set_calls.append((key, value, ttl_seconds))
        if self.set_error:
            raise self.set_error
        self.store[key] = value

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key for key in self.store if fnmatch.fnmatchcase(key, pattern)]
        for key in keys:
            del self.store[key]
        return len(keys)

    async def ping(self) -> bool:
        if self.get_error:
            raise self.get_error
        return True


class FakeGeocoder:
    def __init__(self, known: dict[str, Coordinate] | None = None) -> None:
        self.known = known or {}
        self.calls: list[str] = []

    async def geocode(self, zip_code: str) -> Optional[Coordinate]:
        self.calls.append(zip_code)
        return self.known.get(zip_code)
