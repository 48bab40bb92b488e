import pytest

from farmstand.services.ranking.nearby import get_nearby_products

from fakes import NOW, ORIGIN, FakeCatalog, make_zone, make_product


async def test_closest_products_excluding_current() -> None:
    catalog = FakeCatalog(
        [
            make_product("viewing", km=0.5),
            make_product("P10", km=10),
            make_product("P3", km=3),
            make_product("P50", km=50),
            make_product("P7", km=7),
            make_product("delivery-only", zone=make_zone("Z1", ["19103"])),
        ]
    )

    products = await get_nearby_products("viewing", ORIGIN, catalog, now=NOW)

    assert [p.id for p in products] == ["P3", "P7", "P10"]
    assert products[0].nearest_pickup_distance_km == pytest.approx(3.0)


async def test_far_products_are_not_filtered_by_radius() -> None:
    catalog = FakeCatalog([make_product("P900", km=900), make_product("P2000", km=2000)])

    products = await get_nearby_products("other", ORIGIN, catalog, now=NOW)

    assert [p.id for p in products] == ["P900", "P2000"]


async def test_catalog_failure_returns_empty_list() -> None:
    assert await get_nearby_products("viewing", ORIGIN, FakeCatalog(error=RuntimeError("boom")), now=NOW) == []
