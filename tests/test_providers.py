import httpx
import pytest

from cryptoscope.errors import RATE_LIMITED_MESSAGE, NetworkError, RateLimited, UpstreamError
from cryptoscope.providers import CoingeckoProvider

from conftest import COINGECKO_BASE, LLAMA_BASE, STABLES_BASE, YIELDS_BASE


@pytest.mark.asyncio
async def test_fetch_json_returns_body_and_exact_url(coingecko_factory):
    provider, transport = coingecko_factory({"/global": {"data": {"markets": 1}}})

    response = await provider.get_global()

    assert response.data == {"data": {"markets": 1}}
    assert response.url == f"{COINGECKO_BASE}/global"
    assert transport.last.headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_429_maps_to_rate_limited(coingecko_factory):
    provider, _ = coingecko_factory({"/global": (429, {"status": "slow down"})})

    with pytest.raises(RateLimited) as exc_info:
        await provider.get_global()

    assert str(exc_info.value) == RATE_LIMITED_MESSAGE
    assert exc_info.value.url == f"{COINGECKO_BASE}/global"
    assert exc_info.value.error_type == "rate_limited"


@pytest.mark.asyncio
async def test_non_success_maps_to_upstream_error(coingecko_factory):
    provider, _ = coingecko_factory({})

    with pytest.raises(UpstreamError) as exc_info:
        await provider.get_coin("not-a-coin")

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "API request failed: 404 Not Found"


@pytest.mark.asyncio
async def test_invalid_json_maps_to_upstream_error(coingecko_factory):
    provider, _ = coingecko_factory({"/global": lambda request: httpx.Response(200, text="<html>oops</html>")})

    with pytest.raises(UpstreamError) as exc_info:
        await provider.get_global()

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_transport_failure_maps_to_network_error(make_transport):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = CoingeckoProvider(COINGECKO_BASE, transport=make_transport({"/api/v3/ping": refuse}))

    with pytest.raises(NetworkError) as exc_info:
        await provider.fetch_json("/ping")

    assert exc_info.value.error_type == "network_error"
    assert exc_info.value.url == f"{COINGECKO_BASE}/ping"


@pytest.mark.asyncio
async def test_path_segments_are_percent_encoded(coingecko_factory):
    provider, transport = coingecko_factory({})

    with pytest.raises(UpstreamError):
        await provider.get_coin("a/b c")

    assert transport.last.url.raw_path.startswith(b"/api/v3/coins/a%2Fb%20c?")


@pytest.mark.asyncio
async def test_query_values_are_encoded(coingecko_factory):
    provider, transport = coingecko_factory({"/search": {"coins": []}})

    await provider.search("bitcoin cash&more")

    assert transport.last.url.params["query"] == "bitcoin cash&more"


@pytest.mark.asyncio
async def test_simple_price_params(coingecko_factory):
    provider, transport = coingecko_factory({"/simple/price": {}})

    await provider.get_simple_price(["bitcoin", "ethereum"], ["usd"])

    params = transport.last.url.params
    assert params["ids"] == "bitcoin,ethereum"
    assert params["vs_currencies"] == "usd"
    assert params["include_market_cap"] == "true"
    assert params["include_24hr_change"] == "true"


@pytest.mark.asyncio
async def test_category_markets_request(coingecko_factory):
    provider, transport = coingecko_factory({"/coins/markets": []})

    await provider.get_category_markets("layer-1")

    params = transport.last.url.params
    assert params["category"] == "layer-1"
    assert params["per_page"] == "50"
    assert params["sparkline"] == "false"
    assert "price_change_percentage" not in params


@pytest.mark.asyncio
async def test_defillama_hosts(defillama_factory):
    provider, transport = defillama_factory({
        "/pools": {"data": []},
        "/stablecoins": {"peggedAssets": []},
        "/overview/dexs": {"protocols": []},
    })

    pools = await provider.get_yield_pools()
    stables = await provider.get_stablecoins()
    dexs = await provider.get_dex_overview()

    assert pools.url == f"{YIELDS_BASE}/pools"
    assert stables.url == f"{STABLES_BASE}/stablecoins?includePrices=true"
    assert dexs.url.startswith(f"{LLAMA_BASE}/overview/dexs?")
    assert transport.last.url.params["excludeTotalDataChart"] == "true"


def test_protocol_url_encodes_slug(defillama_factory):
    provider, _ = defillama_factory({})

    assert provider.protocol_url("aave") == f"{LLAMA_BASE}/protocol/aave"
    assert provider.protocol_url("a/b") == f"{LLAMA_BASE}/protocol/a%2Fb"


@pytest.mark.asyncio
async def test_health_check_reports_status(fear_greed_factory):
    healthy, transport = fear_greed_factory({"/fng/": {"data": []}})
    broken, _ = fear_greed_factory({"/fng/": (500, {})})

    assert await healthy.health_check() == {"status": "healthy"}
    assert transport.last.url.params["limit"] == "1"

    status = await broken.health_check()
    assert status["status"] == "error"
    assert "500" in status["reason"]


@pytest.mark.asyncio
async def test_undecodable_body_maps_to_network_error(defillama_factory):
    def bad_gzip(request):
        return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

    provider, _ = defillama_factory({"/protocol/broken": bad_gzip})

    with pytest.raises(NetworkError) as exc_info:
        await provider.get_protocol("broken")

    assert exc_info.value.url == f"{LLAMA_BASE}/protocol/broken"
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)


@pytest.mark.asyncio
async def test_defillama_429_maps_to_rate_limited(defillama_factory):
    provider, _ = defillama_factory({"/v2/chains": (429, {})})

    with pytest.raises(RateLimited) as exc_info:
        await provider.get_chains()

    assert exc_info.value.url == f"{LLAMA_BASE}/v2/chains"
    assert str(exc_info.value) == RATE_LIMITED_MESSAGE
