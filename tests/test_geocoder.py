import httpx
import pytest

from farmstand.data.geocoder import ZipGeocoder, is_valid_zip_code


def _geocoder(handler) -> ZipGeocoder:
    return ZipGeocoder(base_url="https://geo.test/us/", timeout=1, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("value, expected", [("19103", True), (" 19103 ", True), ("1910", False), ("abcde", False), ("", False), (None, False)])
def test_zip_code_validation(value, expected) -> None:
    assert is_valid_zip_code(value) is expected


async def test_geocode_reads_first_place() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(
            200,
            json={"post code": "19103", "places": [{"latitude": "39.9523", "longitude": "-75.1735"}, {"latitude": "0", "longitude": "0"}]},
        )

    coordinate = await _geocoder(handler).geocode("19103")

    assert seen == ["https://geo.test/us/19103"]
    assert coordinate.lat == pytest.approx(39.9523)
    assert coordinate.lng == pytest.approx(-75.1735)


async def test_unknown_zip_is_none() -> None:
    coordinate = await _geocoder(lambda request: httpx.Response(404, json={})).geocode("00000")

    assert coordinate is None


async def test_transport_error_is_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    assert await _geocoder(handler).geocode("19103") is None


async def test_unexpected_payload_is_none() -> None:
    assert await _geocoder(lambda request: httpx.Response(200, text="not json")).geocode("19103") is None
    assert await _geocoder(lambda request: httpx.Response(200, json={"places": []})).geocode("19103") is None
    assert await _geocoder(lambda request: httpx.Response(200, json={"places": [{"latitude": "x"}]})).geocode("19103") is None


async def test_invalid_zip_makes_no_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _geocoder(handler).geocode("abc") is None
