import pytest
from fastapi.testclient import TestClient

from cryptoscope.api.tools import get_tool_executor
from cryptoscope.core.agent.tools import ToolExecutor, ToolRegistry
from cryptoscope.main import app


@pytest.fixture
def client(coingecko_factory, defillama_factory, fear_greed_factory):
    coingecko, _ = coingecko_factory({
        "/ping": {"gecko_says": "(V3) To the Moon!"},
        "/global": {"data": {"market_cap_percentage": {"btc": 54.3189}}},
        "/coins/markets": (429, {}),
    })
    defillama, _ = defillama_factory({"/v2/chains": (503, {})})
    fear_greed, _ = fear_greed_factory({"/fng/": {"data": []}})
    executor = ToolExecutor(ToolRegistry(coingecko=coingecko, defillama=defillama, fear_greed=fear_greed))

    app.dependency_overrides[get_tool_executor] = lambda: executor
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestCryptoscopeAPI:
    """HTTP surface over the tool registry"""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["tools"] == "/tools"

    def test_request_id_is_echoed(self, client):
        response = client.get("/", headers={"x-request-id": "req-1"})
        assert response.headers["x-request-id"] == "req-1"

    def test_health_endpoint(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "degraded"
        assert data["total_providers"] == 3
        assert data["available_providers"] == 2
        assert data["providers"]["coingecko"] == {"status": "healthy"}
        assert data["providers"]["defillama"]["status"] == "error"

    def test_list_tools(self, client):
        response = client.get("/tools")
        assert response.status_code == 200

        tools = {tool["name"]: tool for tool in response.json()}
        assert len(tools) == 20
        assert tools["get_crypto_price"]["input_schema"]["required"] == ["token_ids"]

    def test_invoke_tool(self, client):
        response = client.post("/tools/get_global_crypto_data", json={})
        assert response.status_code == 200

        data = response.json()
        assert data["error"] is None
        assert data["result"]["data"]["btc_dominance"] == "54.32%"
        assert data["result"]["source_urls"] == ["https://cg.test/api/v3/global"]
        assert response.headers["x-request-id"]

    @pytest.mark.parametrize(
        "path, body, status, error_type",
        [
            ("/tools/get_stock_price", {}, 404, "unknown_tool"),
            ("/tools/get_crypto_ohlc", {"token_id": "bitcoin", "days": 0}, 422, "validation_error"),
            ("/tools/get_top_crypto_coins", {"limit": 5}, 429, "rate_limited"),
        ],
    )
    def test_invoke_tool_errors(self, client, path, body, status, error_type):
        response = client.post(path, json=body)
        assert response.status_code == status
        assert response.json()["detail"]["error_type"] == error_type
