"""Pydantic request/response models for product listing endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, model_validator

from ..models.domain import Badge, Coordinate, ShopperLocation


class PickupLocationModel(BaseModel):
    id: str
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_name: str = ""


class PickupLocationDistance(BaseModel):
    location: PickupLocationModel
    distance_km: Optional[float] = None
    is_primary: bool = False


class DeliveryEligibility(BaseModel):
    is_eligible: bool
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    fee: Optional[int] = None
    minimum_order: Optional[int] = None
    free_delivery_threshold: Optional[int] = None
    delivery_days: list[str] = Field(default_factory=list)


class RankedProduct(BaseModel):
    """A purchasable product with its distance, delivery terms and availability badge."""

    id: str
    name: str
    description: Optional[str] = None
    price: int = Field(..., description="Price in minor currency units.")
    images: list[str] = Field(default_factory=list)
    inventory: int
    is_active: bool
    status: str
    tags: list[str] = Field(default_factory=list)
    delivery_available: bool = False
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    nearest_pickup_distance_km: Optional[float] = None
    all_pickup_locations: list[PickupLocationDistance] = Field(default_factory=list)
    delivery_eligibility: Optional[DeliveryEligibility] = None
    availability_badge: Badge
    availability_tier: int = Field(..., ge=1, le=3)

    @property
    def nearest_pickup_location(self) -> Optional[PickupLocationModel]:
        if not self.all_pickup_locations:
            return None
        return self.all_pickup_locations[0].location


RankedProductList = TypeAdapter(list[RankedProduct])


class ShopperLocationQuery(BaseModel):
    """Shopper location as passed in query parameters."""

    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    source: Literal["browser", "zipcode"] = "browser"
    zip_code: Optional[str] = Field(default=None, pattern=r"^\d{5}$")
    accuracy: Optional[float] = Field(default=None, ge=0.0)

    @model_validator(mode="after")
    def _check_source_requirements(self) -> "ShopperLocationQuery":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        if self.source == "zipcode" and self.lat is not None and not self.zip_code:
            raise ValueError("zip_code is required when source is 'zipcode'")
        return self

    def to_domain(self) -> Optional[ShopperLocation]:
        if self.lat is None or self.lng is None:
            return None
        return ShopperLocation(
            coords=Coordinate(lat=self.lat, lng=self.lng),
            source=self.source,
            zip_code=self.zip_code,
            accuracy=self.accuracy,
        )
