"""Candidate pickup locations and delivery zones for a single product."""

from __future__ import annotations

from dataclasses import dataclass, field

from ...models.domain import DeliveryZone, PickupLocation, ProductRecord


@dataclass(slots=True)
class PickupCandidate:
    location: PickupLocation
    is_primary: bool = False


@dataclass(slots=True)
class Fulfillment:
    """Identity-deduplicated ways a product can reach a shopper, in listing order."""

    pickup_locations: list[PickupCandidate] = field(default_factory=list)
    delivery_zones: list[DeliveryZone] = field(default_factory=list)

    @property
    def has_pickup(self) -> bool:
        return bool(self.pickup_locations)

    @property
    def has_delivery(self) -> bool:
        return bool(self.delivery_zones)


def resolve_fulfillment(product: ProductRecord) -> Fulfillment:
    """Collect the product's pickup locations and delivery zones.

    The primary stand is kept only when it has a coordinate; cross-listed stands
    only when the listing is active. The primary delivery zone counts only when
    the product has delivery enabled. A location or zone reachable through both
    its primary assignment and a cross-listing appears once.
    """
    result = Fulfillment()
    seen_locations: set[str] = set()
    seen_zones: set[str] = set()

    primary = product.pickup_location
    if primary is not None and primary.coordinate is not None:
        result.pickup_locations.append(PickupCandidate(location=primary, is_primary=True))
        seen_locations.add(primary.id)

    for listing in product.stand_listings or ():
        location = listing.location
        if not listing.is_active or location is None:
            continue
        if location.id in seen_locations:
            continue
        result.pickup_locations.append(PickupCandidate(location=location))
        seen_locations.add(location.id)

    zone = product.delivery_zone
    if product.delivery_available and zone is not None:
        result.delivery_zones.append(zone)
        seen_zones.add(zone.id)

    for listing in product.delivery_listings or ():
        listed_zone = listing.zone
        if listed_zone is None or listed_zone.id in seen_zones:
            continue
        result.delivery_zones.append(listed_zone)
        seen_zones.add(listed_zone.id)

    return result
