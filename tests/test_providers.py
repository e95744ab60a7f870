import asyncio
import json

import httpx
import pytest

from tests.helpers import (
    DESTINATION,
    GRAPHHOPPER_HOST,
    MAPBOX_HOST,
    ORIGIN,
    OSRM_HOST,
    graphhopper_body,
    mapbox_body,
    osrm_body,
)
from routing.coordinates import LatLng
from routing.graphhopper_client import GraphHopperClient
from routing.mapbox_client import MapboxClient
from routing.models import FetchStatus, ProviderName
from routing.osrm_client import OSRMClient

A = LatLng(*ORIGIN)
B = LatLng(*DESTINATION)


def osrm(client, timeout=1.0):
    return OSRMClient(client, base_url=f"https://{OSRM_HOST}", profile="foot", timeout=timeout)


def graphhopper(client, key="gh-key"):
    return GraphHopperClient(
        client, base_url=f"https://{GRAPHHOPPER_HOST}", profile="foot", timeout=1.0, credential=key
    )


def mapbox(client, token="mb-token"):
    return MapboxClient(
        client, base_url=f"https://{MAPBOX_HOST}", profile="walking", timeout=1.0, credential=token
    )


#----------------
# request shapes + parsing
#----------------
@pytest.mark.asyncio
async def test_osrm_builds_lnglat_path_and_parses_first_route(server, client):
    server.on(OSRM_HOST, json=osrm_body())

    route = await osrm(client).fetch_route(A, B)

    request = server.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/route/v1/foot/75.7689,23.1828;75.7889,23.1769"
    assert request.url.params["overview"] == "full"
    assert request.url.params["geometries"] == "geojson"

    assert route.provider is ProviderName.OSRM
    assert len(route.coordinates) == 4
    assert route.coordinates[0] == LatLng(23.1828, 75.7689)
    assert route.coordinates[-1] == LatLng(23.1769, 75.7889)
    assert route.distance_m == pytest.approx(2350.4)
    assert route.duration_s == pytest.approx(1710.2)


@pytest.mark.asyncio
async def test_graphhopper_posts_points_with_key_and_converts_ms(server, client):
    server.on(GRAPHHOPPER_HOST, json=graphhopper_body(time_ms=1650400))

    route = await graphhopper(client).fetch_route(A, B)

    request = server.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/1/route"
    assert request.url.params["key"] == "gh-key"
    assert request.url.params["profile"] == "foot"
    assert request.url.params["points_encoded"] == "false"
    assert json.loads(request.content) == {"points": [[75.7689, 23.1828], [75.7889, 23.1769]]}

    assert route.provider is ProviderName.GRAPHHOPPER
    assert route.duration_s == 1650
    assert route.distance_m == pytest.approx(2290.0)


@pytest.mark.asyncio
async def test_graphhopper_without_time_leaves_duration_empty(server, client):
    body = graphhopper_body()
    del body["paths"][0]["time"]
    server.on(GRAPHHOPPER_HOST, json=body)

    route = await graphhopper(client).fetch_route(A, B)
    assert route.duration_s is None


@pytest.mark.asyncio
async def test_mapbox_sends_token_and_walking_profile(server, client):
    server.on(MAPBOX_HOST, json=mapbox_body())

    route = await mapbox(client).fetch_route(A, B)

    request = server.requests[0]
    assert request.url.path == "/directions/v5/mapbox/walking/75.7689,23.1828;75.7889,23.1769"
    assert request.url.params["access_token"] == "mb-token"
    assert route.provider is ProviderName.MAPBOX
    assert route.duration_s == pytest.approx(1690.0)


@pytest.mark.asyncio
async def test_coordinates_are_clamped_before_the_request(server, client):
    server.on(OSRM_HOST, json=osrm_body())

    await osrm(client).fetch_route(LatLng(95.0, 200.0), B)

    assert server.requests[0].url.path.startswith("/route/v1/foot/180.0,90.0;")


#----------------
# failure modes: every one of them is None, never an exception
#----------------
@pytest.mark.asyncio
@pytest.mark.parametrize("make", [graphhopper, mapbox])
async def test_missing_credential_never_touches_network(server, client, make):
    provider = make(client, None)

    outcome = await provider.attempt(A, B)

    assert outcome.status is FetchStatus.NOT_CONFIGURED
    assert outcome.route is None
    assert server.requests == []


@pytest.mark.asyncio
async def test_blank_credential_counts_as_missing(client):
    assert not graphhopper(client, "").is_configured()
    assert osrm(client).is_configured()


@pytest.mark.asyncio
async def test_non_success_status_is_http_error(server, client):
    server.on(OSRM_HOST, status=502, json={"message": "bad gateway"})

    outcome = await osrm(client).attempt(A, B)

    assert outcome.status is FetchStatus.HTTP_ERROR
    assert "502" in outcome.detail
    assert await osrm(client).fetch_route(A, B) is None


@pytest.mark.asyncio
async def test_transport_error_is_http_error(server, client):
    server.on(OSRM_HOST, error=httpx.ConnectError("connection refused"))

    outcome = await osrm(client).attempt(A, B)
    assert outcome.status is FetchStatus.HTTP_ERROR


@pytest.mark.asyncio
async def test_non_json_body_is_bad_response(server, client):
    server.on(OSRM_HOST, json=None)

    outcome = await osrm(client).attempt(A, B)
    assert outcome.status is FetchStatus.BAD_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"code": "InvalidQuery", "message": "Query string malformed"},
        {"code": "Ok", "routes": [{"geometry": None}]},
        {"code": "Ok", "routes": [{"geometry": {"coordinates": [["a", "b"], [1, 2]]}}]},
        {"code": "Ok", "routes": [{"geometry": {"coordinates": "not a list"}}]},
    ],
)
async def test_malformed_payload_is_bad_response(server, client, body):
    server.on(OSRM_HOST, json=body)

    outcome = await osrm(client).attempt(A, B)
    assert outcome.status is FetchStatus.BAD_RESPONSE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"code": "Ok", "routes": []},
        {"code": "NoRoute", "message": "Impossible route between points"},
        osrm_body(points=[ORIGIN]),
    ],
)
async def test_no_usable_path_is_a_failure_not_an_empty_success(server, client, body):
    server.on(OSRM_HOST, json=body)

    outcome = await osrm(client).attempt(A, B)

    assert outcome.status is FetchStatus.NO_PATH
    assert outcome.route is None


@pytest.mark.asyncio
async def test_graphhopper_empty_paths_is_no_path(server, client):
    server.on(GRAPHHOPPER_HOST, json={"paths": []})

    outcome = await graphhopper(client).attempt(A, B)
    assert outcome.status is FetchStatus.NO_PATH


@pytest.mark.asyncio
async def test_mapbox_no_route_code_is_no_path(server, client):
    server.on(MAPBOX_HOST, json={"code": "NoRoute", "routes": []})

    outcome = await mapbox(client).attempt(A, B)
    assert outcome.status is FetchStatus.NO_PATH


#----------------
# timeout + cancellation
#----------------
@pytest.mark.asyncio
async def test_slow_provider_times_out_and_leaves_nothing_running(server, client):
    server.on(OSRM_HOST, json=osrm_body(), delay=5.0)

    outcome = await osrm(client, timeout=0.05).attempt(A, B)

    assert outcome.status is FetchStatus.TIMEOUT
    assert asyncio.all_tasks() == {asyncio.current_task()}


@pytest.mark.asyncio
async def test_cancel_event_aborts_request_in_flight(server, client):
    server.on(OSRM_HOST, json=osrm_body(), delay=5.0)
    cancel = asyncio.Event()
    asyncio.get_running_loop().call_later(0.02, cancel.set)

    outcome = await osrm(client, timeout=2.0).attempt(A, B, cancel)

    assert outcome.status is FetchStatus.CANCELLED
    assert len(server.requests) == 1
    assert asyncio.all_tasks() == {asyncio.current_task()}


@pytest.mark.asyncio
async def test_cancel_already_set_skips_the_request(server, client):
    server.on(OSRM_HOST, json=osrm_body())
    cancel = asyncio.Event()
    cancel.set()

    assert await osrm(client).fetch_route(A, B, cancel) is None
    assert server.requests == []


@pytest.mark.asyncio
async def test_unset_cancel_event_does_not_get_in_the_way(server, client):
    server.on(OSRM_HOST, json=osrm_body())

    route = await osrm(client).fetch_route(A, B, asyncio.Event())

    assert route is not None
    assert asyncio.all_tasks() == {asyncio.current_task()}
