from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

from cryptoscope.providers import CoingeckoProvider, DefiLlamaProvider, FearGreedProvider

COINGECKO_BASE = "https://cg.test/api/v3"
LLAMA_BASE = "https://llama.test"
YIELDS_BASE = "https://yields.test"
STABLES_BASE = "https://stables.test"
FNG_BASE = "https://fng.test"

Route = Union[Any, tuple, Callable[[httpx.Request], httpx.Response]]


class RecordingTransport(httpx.MockTransport):
    """Answers by URL path and keeps every request it saw.

    A route is a JSON payload (200), a (status, payload) tuple, or a callable
    (plain or async) taking the request.
    """

    def __init__(self, routes: Dict[str, Route]):
        self.routes = routes
        self.requests: List[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        if isinstance(route, tuple):
            status, payload = route
            return httpx.Response(status, json=payload)
        return httpx.Response(200, json=route)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_transport():
    return RecordingTransport


@pytest.fixture
def coingecko_factory():
    def make(routes: Dict[str, Route]):
        transport = RecordingTransport({f"/api/v3{path}": route for path, route in routes.items()})
        return CoingeckoProvider(COINGECKO_BASE, transport=transport), transport
    return make


@pytest.fixture
def defillama_factory():
    def make(routes: Dict[str, Route]):
        transport = RecordingTransport(routes)
        provider = DefiLlamaProvider(
            LLAMA_BASE,
            yields_base_url=YIELDS_BASE,
            stablecoins_base_url=STABLES_BASE,
            transport=transport,
        )
        return provider, transport
    return make


@pytest.fixture
def fear_greed_factory():
    def make(routes: Dict[str, Route]):
        transport = RecordingTransport(routes)
        return FearGreedProvider(FNG_BASE, transport=transport), transport
    return make
