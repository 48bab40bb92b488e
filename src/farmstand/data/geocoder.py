"""Zip code geocoding over HTTP."""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

from ..config import settings
from ..models.domain import Coordinate

logger = logging.getLogger(__name__)

ZIP_CODE_PATTERN = re.compile(r"^\d{5}$")


def is_valid_zip_code(zip_code: Optional[str]) -> bool:
    return bool(zip_code) and bool(ZIP_CODE_PATTERN.match(zip_code.strip()))


class ZipGeocoder:
    """Resolves US zip codes to coordinates using the Zippopotam.us API.

    Never raises: invalid input, HTTP errors and unexpected payloads all
    resolve to None.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self._transport = transport

    async def geocode(self, zip_code: str) -> Optional[Coordinate]:
        if not is_valid_zip_code(zip_code):
            return None

        url = f"{self.base_url}/{zip_code.strip()}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
            if response.status_code != httpx.codes.OK:
                logger.debug(f"Geocoder returned {response.status_code} for zip {zip_code}")
                return None
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Geocoding zip {zip_code} failed: {e}")
            return None

        places = data.get("places") if isinstance(data, dict) else None
        if not places:
            return None
        try:
            lat = float(places[0]["latitude"])
            lng = float(places[0]["longitude"])
        except (KeyError, TypeError, ValueError):
            return None
        return Coordinate(lat=lat, lng=lng)
