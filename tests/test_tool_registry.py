"""
Tool registry and executor tests.

Covers the 20 registered tools, their LLM-facing schemas, and how the
executor reports validation, provider and unknown-tool failures.
"""

import json

import pytest

from cryptoscope.core.agent.prompts import (
    CRYPTO_PLAN_EXAMPLES,
    DEFAULT_SYSTEM_PROMPT,
    FINAL_ANSWER_CRYPTO_GUIDELINES,
    PLAN_TOOL_HINTS,
    build_tool_descriptions,
)
from cryptoscope.core.agent.tools import ToolExecutor, ToolRegistry
from cryptoscope.errors import RATE_LIMITED_MESSAGE
from cryptoscope.types import ToolCall, ToolResult

EXPECTED_TOOLS = {
    "search_crypto_tokens",
    "get_trending_crypto",
    "get_crypto_token_info",
    "get_crypto_price",
    "get_crypto_ohlc",
    "get_crypto_price_history",
    "get_global_crypto_data",
    "get_top_crypto_coins",
    "get_crypto_fear_greed",
    "get_crypto_categories",
    "get_crypto_by_sector",
    "get_crypto_exchanges",
    "get_top_defi_protocols",
    "get_defi_protocol_detail",
    "get_chain_tvl_data",
    "get_chain_tvl_trend",
    "get_defi_yields",
    "get_stablecoin_data",
    "get_dex_volume_data",
    "compare_defi_protocols",
}


@pytest.fixture
def registry(coingecko_factory, defillama_factory, fear_greed_factory):
    coingecko, _ = coingecko_factory({
        "/global": {"data": {"market_cap_percentage": {"btc": 54.3189, "eth": 17.0}}},
        "/coins/markets": (429, {"status": {"error_code": 429}}),
    })
    defillama, _ = defillama_factory({"/protocols": []})
    fear_greed, _ = fear_greed_factory({"/fng/": {"data": []}})
    return ToolRegistry(coingecko=coingecko, defillama=defillama, fear_greed=fear_greed)


@pytest.fixture
def executor(registry):
    return ToolExecutor(registry)


def test_registry_has_all_tools(registry):
    names = {definition.name for definition in registry.get_definitions()}
    assert names == EXPECTED_TOOLS
    assert registry.has_tool("get_crypto_price")
    assert registry.get_tool("nope") is None


def test_definitions_follow_input_models(registry):
    schemas = {d.name: d.to_anthropic_format() for d in registry.get_definitions()}

    price = schemas["get_crypto_price"]["input_schema"]
    assert price["required"] == ["token_ids"]
    assert price["properties"]["token_ids"]["type"] == "array"
    assert price["properties"]["token_ids"]["items"] == {"type": "string"}
    assert price["properties"]["vs_currency"]["default"] == "usd"

    yields = schemas["get_defi_yields"]["input_schema"]
    assert yields["required"] == []
    assert yields["properties"]["stablecoin_only"]["type"] == "boolean"
    assert yields["properties"]["min_tvl"]["type"] == "number"
    assert yields["properties"]["limit"]["type"] == "integer"

    assert schemas["get_trending_crypto"]["input_schema"]["properties"] == {}


def test_tool_descriptions_prompt(registry):
    text = build_tool_descriptions(registry)
    assert text.count("\n") == len(EXPECTED_TOOLS) - 1
    assert "- compare_defi_protocols: Compare up to 5" in text


def test_prompt_constants_cover_registered_tools(registry):
    missing = [d.name for d in registry.get_definitions() if d.name not in PLAN_TOOL_HINTS]
    assert missing == []
    assert "DeFi" in DEFAULT_SYSTEM_PROMPT
    assert "Sources" in FINAL_ANSWER_CRYPTO_GUIDELINES
    assert "DEFI task list:" in CRYPTO_PLAN_EXAMPLES


@pytest.mark.asyncio
async def test_execute_success_returns_envelope(executor):
    result = await executor.execute_single(ToolCall(id="1", name="get_global_crypto_data"))

    assert result.error is None
    assert result.result["data"]["btc_dominance"] == "54.32%"
    assert result.result["source_urls"] == ["https://cg.test/api/v3/global"]
    assert isinstance(result.result["fetched_at"], str)


@pytest.mark.asyncio
async def test_execute_unknown_tool(executor):
    result = await executor.execute_single(ToolCall(id="1", name="get_stock_price"))

    assert result.error_type == "unknown_tool"
    assert "get_stock_price" in result.error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, arguments",
    [
        ("get_crypto_ohlc", {"token_id": "bitcoin", "days": 0}),
        ("get_crypto_token_info", {}),
        ("get_crypto_price", {"token_ids": []}),
        ("compare_defi_protocols", {"protocols": "aave"}),
        ("get_crypto_price_history", {"token_id": "bitcoin", "days": "forever"}),
    ],
)
async def test_execute_rejects_invalid_arguments(executor, name, arguments):
    result = await executor.execute_single(ToolCall(id="1", name=name, arguments=arguments))

    assert result.error_type == "validation_error"
    assert result.result is None


@pytest.mark.asyncio
async def test_execute_reports_rate_limit(executor):
    result = await executor.execute_single(ToolCall(id="1", name="get_top_crypto_coins", arguments={"limit": 5}))

    assert result.error == RATE_LIMITED_MESSAGE
    assert result.error_type == "rate_limited"
    assert result.result["source_urls"][0].startswith("https://cg.test/api/v3/coins/markets?")


@pytest.mark.asyncio
async def test_execute_parallel_keeps_order(executor):
    calls = [
        ToolCall(id="a", name="get_global_crypto_data"),
        ToolCall(id="b", name="missing_tool"),
        ToolCall(id="c", name="get_crypto_fear_greed"),
    ]

    results = await executor.execute_parallel(calls)

    assert [r.tool_call_id for r in results] == ["a", "b", "c"]
    assert [r.error is None for r in results] == [True, False, True]
    assert await executor.execute_parallel([]) == []


def test_tool_result_anthropic_format():
    ok = ToolResult(tool_call_id="1", result={"data": 1})
    failed = ToolResult(tool_call_id="2", result=None, error="boom", error_type="internal_error")

    assert ok.to_anthropic_format() == {
        "type": "tool_result",
        "tool_use_id": "1",
        "content": json.dumps({"data": 1}),
        "is_error": False,
    }
    assert failed.to_anthropic_format()["content"] == "boom"
    assert failed.to_anthropic_format()["is_error"] is True
