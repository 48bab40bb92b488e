"""Pydantic models for delivery eligibility checks."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field


class DeliveryOption(BaseModel):
    date: dt.date
    day_of_week: str
    time_window: str
    delivery_fee: int
    free_delivery_threshold: Optional[int] = None
    minimum_order: Optional[int] = None
    inventory: int
    is_recurring: bool
    delivery_zone_id: str


class DeliveryEligibilityResult(BaseModel):
    is_eligible: bool
    reason: Optional[str] = None
    matched_zip_code: Optional[str] = None
    matched_city: Optional[str] = None
    delivery_options: List[DeliveryOption] = Field(default_factory=list)
