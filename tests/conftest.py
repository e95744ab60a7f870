import asyncio

import httpx
import pytest

from routing.config import ProviderTimeouts, RoutingSettings
from tests.helpers import GRAPHHOPPER_HOST, MAPBOX_HOST, OSRM_HOST


class FakeRoutingServer:
    """
    Stand-in for all three providers, keyed by host.
    Records every request; unknown hosts answer 503.
    """

    def __init__(self):
        self.requests = []
        self._handlers = {}

    def on(self, host, status=200, json=None, delay=0.0, error=None):
        self._handlers[host] = (status, json, delay, error)

    def hits(self, host):
        return [request for request in self.requests if request.url.host == host]

    async def __call__(self, request):
        self.requests.append(request)
        status, body, delay, error = self._handlers.get(request.url.host, (503, {"message": "down"}, 0.0, None))
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        if body is None:
            return httpx.Response(status, text="")
        return httpx.Response(status, json=body)


@pytest.fixture
def server():
    return FakeRoutingServer()


@pytest.fixture
def client(server):
    return httpx.AsyncClient(transport=httpx.MockTransport(server))


@pytest.fixture
def make_settings():
    def _make(**overrides):
        values = dict(
            osrm_base_url=f"https://{OSRM_HOST}",
            graphhopper_base_url=f"https://{GRAPHHOPPER_HOST}",
            mapbox_base_url=f"https://{MAPBOX_HOST}",
            timeouts=ProviderTimeouts(osrm=1.0, graphhopper=1.0, mapbox=1.0),
        )
        values.update(overrides)
        return RoutingSettings(**values)

    return _make
