"""Per-product delivery eligibility and upcoming delivery options for a shopper address."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

from ...config import settings
from ...data.base import CatalogReader
from ...models.domain import DeliveryType, DeliveryZone, ProductRecord
from ...schemas.delivery import DeliveryEligibilityResult, DeliveryOption
from ..ranking.badges import weekday_name
from ..ranking.engine import match_delivery_zone
from ..ranking.fulfillment import resolve_fulfillment

logger = logging.getLogger(__name__)

DEFAULT_TIME_WINDOW = "9am - 5pm"


def _match_by_city(zones: Sequence[DeliveryZone], city: Optional[str], state: Optional[str]) -> Optional[DeliveryZone]:
    if not city or not state:
        return None
    city_lower, state_lower = city.strip().lower(), state.strip().lower()
    for zone in zones:
        if any(c.lower() == city_lower for c in zone.cities) and any(s.lower() == state_lower for s in zone.states):
            return zone
    return None


def _option(zone: DeliveryZone, day: date, inventory: int, is_recurring: bool) -> DeliveryOption:
    day_name = weekday_name(day)
    return DeliveryOption(
        date=day,
        day_of_week=day_name,
        time_window=zone.delivery_time_windows.get(day_name) or DEFAULT_TIME_WINDOW,
        delivery_fee=zone.delivery_fee,
        free_delivery_threshold=zone.free_delivery_threshold,
        minimum_order=zone.minimum_order,
        inventory=inventory,
        is_recurring=is_recurring,
        delivery_zone_id=zone.id,
    )


def build_delivery_options(product: ProductRecord, zone: DeliveryZone, today: date) -> list[DeliveryOption]:
    """Upcoming delivery dates for ``product`` in ``zone``, sorted by date."""

    options: list[DeliveryOption] = []
    if product.delivery_type is DeliveryType.ONE_TIME:
        for moment in product.delivery_dates:
            options.append(_option(zone, moment.date(), product.inventory, is_recurring=False))
    elif product.delivery_type is DeliveryType.RECURRING:
        horizon = [today + timedelta(days=offset) for offset in range(settings.delivery_horizon_days)]
        listings = [
            listing
            for listing in product.delivery_listings
            if listing.zone is not None and listing.zone.id == zone.id and listing.day_of_week
        ]
        if listings:
            for day in horizon:
                day_name = weekday_name(day).lower()
                listing = next((l for l in listings if l.day_of_week.lower() == day_name), None)
                if listing is not None and (listing.inventory or 0) > 0:
                    options.append(_option(zone, day, listing.inventory, is_recurring=True))
        elif zone.delivery_days:
            zone_days = {d.lower() for d in zone.delivery_days}
            for day in horizon:
                if weekday_name(day).lower() in zone_days:
                    options.append(_option(zone, day, product.inventory, is_recurring=True))

    options.sort(key=lambda option: option.date)
    return options


async def check_delivery_eligibility(
    product_id: str,
    catalog: CatalogReader,
    zip_code: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    today: Optional[date] = None,
) -> DeliveryEligibilityResult:
    """Whether ``product_id`` delivers to the given address, with its upcoming delivery options."""

    try:
        product = await catalog.get_product(product_id)
    except Exception as e:
        logger.warning(f"Error checking delivery eligibility for {product_id}: {e}")
        return DeliveryEligibilityResult(is_eligible=False, reason="Error checking delivery availability")

    if product is None:
        return DeliveryEligibilityResult(is_eligible=False, reason="Product not found")
    if not product.delivery_available:
        return DeliveryEligibilityResult(is_eligible=False, reason="Delivery not available for this product")

    zones = resolve_fulfillment(product).delivery_zones
    if not zones:
        return DeliveryEligibilityResult(is_eligible=False, reason="No delivery zone configured")

    matched_zip = None
    matched_city = None
    zone = match_delivery_zone(zones, zip_code)
    if zone is not None:
        matched_zip = zip_code
    else:
        zone = _match_by_city(zones, city, state)
        if zone is not None:
            matched_city = city

    if zone is None:
        reason = (
            f"Delivery not available to {zip_code}"
            if zip_code
            else "Please provide your ZIP code to check delivery availability"
        )
        return DeliveryEligibilityResult(is_eligible=False, reason=reason)

    today = today or datetime.now(timezone.utc).date()
    return DeliveryEligibilityResult(
        is_eligible=True,
        matched_zip_code=matched_zip,
        matched_city=matched_city,
        delivery_options=build_delivery_options(product, zone, today),
    )
