"""Domain models for catalog products and their fulfillment relations."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional

LocationSource = Literal["browser", "zipcode"]
PageKind = Literal["initial", "continuation"]


class Badge(str, Enum):
    """Single status label summarizing whether a product can be bought right now."""

    SOLD_OUT = "SOLD_OUT"
    PRE_ORDER = "PRE_ORDER"
    EXPIRED = "EXPIRED"
    UNAVAILABLE = "UNAVAILABLE"
    AVAILABLE_NOW = "AVAILABLE_NOW"
    AVAILABLE = "AVAILABLE"


class ProductStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DeliveryType(str, Enum):
    RECURRING = "RECURRING"
    ONE_TIME = "ONE_TIME"


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(slots=True)
class ShopperLocation:
    """Where the shopper is browsing from, captured by the browser or derived from a zip code."""

    coords: Coordinate
    source: LocationSource = "browser"
    zip_code: Optional[str] = None
    accuracy: Optional[float] = None
    captured_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.source == "zipcode" and not self.zip_code:
            raise ValueError("A zip code is required when the location source is 'zipcode'.")
        if self.coords is None:
            raise ValueError("Coordinates are required for a shopper location.")


@dataclass(slots=True)
class PickupLocation:
    """A market stand where a product can be collected."""

    id: str
    name: str
    coordinate: Optional[Coordinate]
    location_name: str = ""
    is_active: bool = True
    hours: Optional[dict] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DeliveryZone:
    """A named coverage area with its own fee, day and minimum-order terms."""

    id: str
    name: str
    is_active: bool = True
    zip_codes: frozenset[str] = frozenset()
    cities: tuple[str, ...] = ()
    states: tuple[str, ...] = ()
    delivery_days: tuple[str, ...] = ()
    delivery_fee: int = 0
    free_delivery_threshold: Optional[int] = None
    minimum_order: Optional[int] = None
    scheduled_dates: tuple[date, ...] = ()
    delivery_time_windows: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class StandListing:
    """Cross-listing of a product at an additional pickup location."""

    location: Optional[PickupLocation]
    is_active: bool = True


@dataclass(slots=True)
class DeliveryListing:
    """Cross-listing of a product in an additional delivery zone."""

    zone: Optional[DeliveryZone]
    day_of_week: Optional[str] = None
    inventory: Optional[int] = None


@dataclass(slots=True)
class ProductRecord:
    """Read-only projection of a catalog product with its fulfillment relations."""

    id: str
    name: str
    price: int
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None
    images: list[str] = field(default_factory=list)
    inventory: int = 0
    is_active: bool = True
    status: ProductStatus = ProductStatus.APPROVED
    tags: list[str] = field(default_factory=list)
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    inventory_updated_at: Optional[datetime] = None
    delivery_available: bool = False
    delivery_type: Optional[DeliveryType] = None
    delivery_dates: tuple[datetime, ...] = ()
    pickup_location: Optional[PickupLocation] = None
    stand_listings: list[StandListing] = field(default_factory=list)
    delivery_zone: Optional[DeliveryZone] = None
    delivery_listings: list[DeliveryListing] = field(default_factory=list)


@dataclass(slots=True)
class Farm:
    """A producer profile shown in search results."""

    id: str
    name: str
    coordinate: Optional[Coordinate]
    location_name: str = ""
    description: Optional[str] = None
    tagline: Optional[str] = None
    slug: Optional[str] = None
    images: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ProductFilter:
    """Catalog query parameters understood by every catalog reader."""

    is_active: bool = True
    status: ProductStatus = ProductStatus.APPROVED
    limit: int = 20
    cursor: Optional[str] = None
    market_stand_id: Optional[str] = None
