"""Pydantic models for global search results."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .products import RankedProduct


class PickupLocationResult(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    latitude: float
    longitude: float
    location_name: str = ""
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    distance_km: float
    href: str


class FarmResult(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    tagline: Optional[str] = None
    slug: Optional[str] = None
    latitude: float
    longitude: float
    location_name: str = ""
    images: List[str] = Field(default_factory=list)
    distance_km: float
    href: str


class SearchLocation(BaseModel):
    lat: float
    lng: float
    zip_code: str


class GlobalSearchResult(BaseModel):
    products: List[RankedProduct] = Field(default_factory=list)
    pickup_locations: List[PickupLocationResult] = Field(default_factory=list)
    farms: List[FarmResult] = Field(default_factory=list)
    location: Optional[SearchLocation] = None

    @classmethod
    def empty(cls) -> "GlobalSearchResult":
        return cls()
