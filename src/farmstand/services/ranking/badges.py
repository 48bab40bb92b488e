"""Availability badge calculation and the operating-hour helpers it relies on."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Mapping, Optional, Sequence

from ...models.domain import Badge

logger = logging.getLogger(__name__)

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_TIME_DIGITS = re.compile(r"[^0-9:]")


@dataclass(slots=True)
class BadgeFacts:
    """Temporal, inventory and operational facts a badge is derived from."""

    total_inventory: int
    has_pickup_location: bool
    has_delivery: bool
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    inventory_updated_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_pickup_location_open_now: Optional[bool] = None
    delivery_days: Sequence[str] = field(default_factory=tuple)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def weekday_name(moment: datetime | date) -> str:
    return DAY_NAMES[moment.weekday()]


def calculate_badge(facts: BadgeFacts, now: Optional[datetime] = None) -> Badge:
    """Map product facts to exactly one badge; rules are checked in priority order."""

    now = _utc(now or datetime.now(timezone.utc))

    if facts.total_inventory <= 0:
        return Badge.SOLD_OUT
    if facts.available_from is not None and _utc(facts.available_from) > now:
        return Badge.PRE_ORDER
    if facts.available_until is not None and _utc(facts.available_until) < now:
        return Badge.EXPIRED
    if not facts.has_pickup_location and not facts.has_delivery:
        return Badge.UNAVAILABLE
    if facts.is_pickup_location_open_now is True:
        return Badge.AVAILABLE_NOW
    if facts.has_delivery and facts.delivery_days:
        today = weekday_name(now).lower()
        if any(day.lower() == today for day in facts.delivery_days):
            return Badge.AVAILABLE_NOW
    return Badge.AVAILABLE


def parse_time(text: str) -> tuple[int, int]:
    """Parse "HH:MM", "H:MM" or either with an AM/PM suffix into 24-hour (hour, minute)."""

    cleaned = text.strip().lower()
    is_pm = "pm" in cleaned
    is_am = "am" in cleaned

    digits = _TIME_DIGITS.sub("", cleaned)
    hour_str, _, minute_str = digits.partition(":")
    hour = int(hour_str)
    minute = int(minute_str or "0")

    if is_pm and hour != 12:
        hour += 12
    elif is_am and hour == 12:
        hour = 0
    return hour, minute


def is_location_open(hours: Optional[Mapping], now: datetime) -> Optional[bool]:
    """Whether a pickup location is open at ``now`` according to its weekly hours.

    Returns None when the hours are missing or cannot be interpreted.
    """
    if not hours or not isinstance(hours, Mapping):
        return None

    today_hours = hours.get(weekday_name(now))
    if not isinstance(today_hours, Mapping):
        return False

    open_time = today_hours.get("open")
    close_time = today_hours.get("close")
    if not open_time or not close_time:
        return False

    try:
        open_hour, open_minute = parse_time(str(open_time))
        close_hour, close_minute = parse_time(str(close_time))
    except ValueError as exc:
        logger.debug(f"Unable to parse operating hours {today_hours!r}: {exc}")
        return None

    current = now.hour * 60 + now.minute
    return open_hour * 60 + open_minute <= current < close_hour * 60 + close_minute


def next_delivery_date(delivery_days: Iterable[str], today: date) -> Optional[date]:
    """Next date strictly after ``today`` that falls on one of the delivery days."""

    index_by_name = {name.lower(): idx for idx, name in enumerate(DAY_NAMES)}
    indices = sorted({index_by_name[day.lower()] for day in delivery_days or () if day.lower() in index_by_name})
    if not indices:
        return None

    current = today.weekday()
    upcoming = next((idx for idx in indices if idx > current), indices[0])
    days_until = upcoming - current
    if days_until <= 0:
        days_until += 7
    return today + timedelta(days=days_until)


def format_delivery_days(delivery_days: Sequence[str]) -> str:
    """Short display form, e.g. ["Monday", "Friday"] -> "Mon & Fri"."""

    if not delivery_days:
        return ""
    short_names = [day[:3] for day in delivery_days]
    if len(short_names) <= 2:
        return " & ".join(short_names)
    return ", ".join(short_names)


def aggregate_inventory(buckets: Iterable[Mapping]) -> int:
    return sum(bucket.get("inventory") or 0 for bucket in buckets)
