"""Contracts for the collaborators the ranking services read from."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..models.domain import Coordinate, Farm, PickupLocation, ProductFilter, ProductRecord


class CatalogReader(Protocol):
    """Read-only access to products with their pickup and delivery relations populated."""

    async def find_active_products(self, filter: ProductFilter) -> Sequence[ProductRecord]: ...

    async def find_active_pickup_locations(self) -> Sequence[PickupLocation]: ...

    async def find_active_farms(self) -> Sequence[Farm]: ...

    async def get_product(self, product_id: str) -> Optional[ProductRecord]: ...


class Cache(Protocol):
    """Key-value store with per-key expiry. Any call may raise."""

    async def get(self, key: str) -> Optional[bytes]: ...

    async def set_with_ttl(self, key: str, value: bytes, ttl_seconds: int) -> None: ...

    async def delete_pattern(self, pattern: str) -> int: ...

    async def ping(self) -> bool: ...


class Geocoder(Protocol):
    async def geocode(self, zip_code: str) -> Optional[Coordinate]: ...
