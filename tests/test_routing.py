"""
Tests for the Distance Matrix routing gateway against a mocked HTTP transport.
"""

import httpx
import pytest

from campus_compass.services.routing import DistanceMatrixGateway, RoutingError
from campus_compass.utils.geo import Coordinates

ORIGIN = Coordinates(34.0689, -118.4452)
DESTINATION = Coordinates(34.0720, -118.4441)

OK_BODY = {
    "status": "OK",
    "rows": [{
        "elements": [{
            "status": "OK",
            "duration": {"value": 725, "text": "12 mins"},
            "distance": {"value": 950, "text": "1.0 km"},
        }],
    }],
}


def _gateway(handler, api_key="test-key") -> DistanceMatrixGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return DistanceMatrixGateway(api_key=api_key, base_url="https://maps.test/api", client=client)


@pytest.mark.asyncio
async def test_walking_route_parses_element():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json=OK_BODY)

    route = await _gateway(handler).walking_route(ORIGIN, DESTINATION)

    assert route.duration_seconds == 725
    assert route.distance_meters == 950
    assert route.distance_text == "1.0 km"
    assert seen["url"].path == "/api/distancematrix/json"
    assert seen["url"].params["mode"] == "walking"
    assert seen["url"].params["origins"] == "34.0689,-118.4452"
    assert seen["url"].params["key"] == "test-key"


@pytest.mark.asyncio
async def test_missing_api_key_is_not_configured():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(RoutingError) as exc_info:
        await _gateway(handler, api_key="").walking_route(ORIGIN, DESTINATION)
    assert exc_info.value.status == "NOT_CONFIGURED"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, status",
    [
        ({"status": "REQUEST_DENIED", "error_message": "API key invalid"}, "REQUEST_DENIED"),
        ({"status": "OVER_QUERY_LIMIT"}, "OVER_QUERY_LIMIT"),
        ({"status": "OK", "rows": [{"elements": [{"status": "ZERO_RESULTS"}]}]}, "ZERO_RESULTS"),
        ({"status": "OK", "rows": []}, "MALFORMED_RESPONSE"),
        ({"status": "OK", "rows": [{"elements": [{"status": "OK"}]}]}, "MALFORMED_RESPONSE"),
        ([], "MALFORMED_RESPONSE"),
    ],
)
async def test_non_ok_responses_raise(body, status):
    gateway = _gateway(lambda request: httpx.Response(200, json=body))
    with pytest.raises(RoutingError) as exc_info:
        await gateway.walking_route(ORIGIN, DESTINATION)
    assert exc_info.value.status == status


@pytest.mark.asyncio
async def test_http_error_status():
    gateway = _gateway(lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(RoutingError) as exc_info:
        await gateway.walking_route(ORIGIN, DESTINATION)
    assert exc_info.value.status == "HTTP_ERROR"


@pytest.mark.asyncio
async def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RoutingError) as exc_info:
        await _gateway(handler).walking_route(ORIGIN, DESTINATION)
    assert exc_info.value.status == "TIMEOUT"


@pytest.mark.asyncio
async def test_non_json_body():
    gateway = _gateway(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(RoutingError) as exc_info:
        await gateway.walking_route(ORIGIN, DESTINATION)
    assert exc_info.value.status == "MALFORMED_RESPONSE"


@pytest.mark.asyncio
async def test_gateway_closes_only_its_own_client():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=OK_BODY)))
    async with DistanceMatrixGateway(api_key="k", client=client) as gateway:
        await gateway.walking_route(ORIGIN, DESTINATION)
    assert not client.is_closed
    await client.aclose()
