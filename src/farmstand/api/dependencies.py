"""FastAPI dependencies supplying the catalog, cache and geocoder collaborators."""

from __future__ import annotations

from ..data.base import Cache, CatalogReader, Geocoder
from ..data.cache import get_cache as _get_redis_cache
from ..data.catalog_repository import SupabaseCatalogReader
from ..data.geocoder import ZipGeocoder


def get_catalog() -> CatalogReader:
    return SupabaseCatalogReader()


def get_cache() -> Cache | None:
    return _get_redis_cache()


def get_geocoder() -> Geocoder:
    return ZipGeocoder()
