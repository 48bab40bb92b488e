import asyncio

import pytest

from farmstand.models.domain import ShopperLocation
from farmstand.schemas.products import RankedProductList
from farmstand.services.ranking import home
from farmstand.services.ranking.engine import rank_products

from fakes import NOW, ORIGIN, FakeCache, FakeCatalog, make_product

KEY = home.settings.static_cache_key


def _snapshot(*product_ids: str) -> bytes:
    ranked = rank_products([make_product(pid, km=5) for pid in product_ids], None, now=NOW)
    return RankedProductList.dump_json(ranked)


async def _drain_background_writes() -> list:
    return await asyncio.gather(*list(home._background_tasks))


async def test_cache_hit_skips_catalog() -> None:
    catalog = FakeCatalog([make_product("fresh", km=1)])
    cache = FakeCache({KEY: _snapshot("cached-1", "cached-2")})

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)

    assert [p.id for p in products] == ["cached-1", "cached-2"]
    assert catalog.product_calls == 0
    assert cache.set_calls == []


async def test_cache_miss_queries_once_and_refreshes_in_background() -> None:
    catalog = FakeCatalog([make_product("A", km=1), make_product("B", km=2)])
    cache = FakeCache()

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    results = await _drain_background_writes()

    assert {p.id for p in products} == {"A", "B"}
    assert catalog.product_calls == 1
    assert catalog.filters[0].limit == home.settings.home_page_size
    assert results == [True]
    assert len(cache.set_calls) == 1
    key, payload, ttl = cache.set_calls[0]
    assert key == KEY
    assert ttl == home.settings.static_cache_ttl_seconds
    assert {p.id for p in RankedProductList.validate_json(payload)} == {"A", "B"}


async def test_empty_snapshot_is_a_miss() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache({KEY: b"[]"})

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    await _drain_background_writes()

    assert [p.id for p in products] == ["A"]
    assert catalog.product_calls == 1


async def test_corrupt_snapshot_is_a_miss() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache({KEY: b"{not json"})

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    await _drain_background_writes()

    assert [p.id for p in products] == ["A"]


async def test_cache_read_error_is_a_miss() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache(get_error=ConnectionError("redis down"))

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    await _drain_background_writes()

    assert [p.id for p in products] == ["A"]
    assert catalog.product_calls == 1


async def test_slow_cache_read_times_out(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(home.settings, "cache_read_timeout_seconds", 0.01)
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache({KEY: _snapshot("cached")}, get_delay=0.5)

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    await _drain_background_writes()

    assert [p.id for p in products] == ["A"]


async def test_background_write_failure_does_not_reach_caller() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache(set_error=ConnectionError("read only"))

    products = await home.get_ranked_home_products(catalog, cache, now=NOW)
    results = await _drain_background_writes()

    assert [p.id for p in products] == ["A"]
    assert results == [False]
    assert KEY not in cache.store


async def test_catalog_failure_returns_empty_list() -> None:
    catalog = FakeCatalog(error=RuntimeError("db unavailable"))
    cache = FakeCache()

    assert await home.get_ranked_home_products(catalog, cache, now=NOW) == []
    assert cache.set_calls == []


async def test_no_cache_configured() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])

    products = await home.get_ranked_home_products(catalog, None, now=NOW)

    assert [p.id for p in products] == ["A"]
    assert home._background_tasks == set()


async def test_shopper_location_uses_geo_ranking() -> None:
    catalog = FakeCatalog([make_product("far", km=100), make_product("near", km=2)])
    cache = FakeCache({KEY: _snapshot("cached")})
    shopper = ShopperLocation(coords=ORIGIN, source="browser")

    products = await home.get_home_products(shopper, "initial", catalog, cache, cursor="2026-10-01T00:00:00+00:00", now=NOW)

    assert [p.id for p in products] == ["near", "far"]
    assert catalog.filters[0].limit == home.settings.geo_batch_size
    assert catalog.filters[0].cursor == "2026-10-01T00:00:00+00:00"
    assert cache.get_calls == []


async def test_empty_geo_result_falls_back_to_snapshot() -> None:
    cache = FakeCache({KEY: _snapshot("cached")})
    shopper = ShopperLocation(coords=ORIGIN, source="zipcode", zip_code="19103")

    products = await home.get_home_products(shopper, "initial", FakeCatalog(), cache, now=NOW)

    assert [p.id for p in products] == ["cached"]


async def test_failed_geo_query_falls_back_to_snapshot() -> None:
    cache = FakeCache({KEY: _snapshot("cached")})
    shopper = ShopperLocation(coords=ORIGIN)

    products = await home.get_home_products(shopper, "initial", FakeCatalog(error=TimeoutError()), cache, now=NOW)

    assert [p.id for p in products] == ["cached"]


async def test_empty_continuation_page_does_not_fall_back() -> None:
    cache = FakeCache({KEY: _snapshot("cached")})
    shopper = ShopperLocation(coords=ORIGIN)

    products = await home.get_home_products(shopper, "continuation", FakeCatalog(), cache, now=NOW)

    assert products == []
    assert cache.get_calls == []


async def test_anonymous_home_uses_snapshot() -> None:
    cache = FakeCache({KEY: _snapshot("cached")})

    products = await home.get_home_products(None, "initial", FakeCatalog([make_product("A")]), cache, now=NOW)

    assert [p.id for p in products] == ["cached"]


async def test_refresh_then_invalidate() -> None:
    catalog = FakeCatalog([make_product("A", km=1)])
    cache = FakeCache({"other:key": b"1"})

    assert await home.refresh_static_products_cache(catalog, cache) is True
    assert [p.id for p in RankedProductList.validate_json(cache.store[KEY])] == ["A"]

    assert await home.invalidate_product_caches(cache) == 1
    assert KEY not in cache.store
    assert "other:key" in cache.store


async def test_refresh_and_invalidate_without_cache() -> None:
    assert await home.refresh_static_products_cache(FakeCatalog(), None) is False
    assert await home.invalidate_product_caches(None) == 0
