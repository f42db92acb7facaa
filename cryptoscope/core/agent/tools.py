"""
Tool Registry and Executor for LLM-driven tool calling.

This module wires the market and DeFi tools to their providers, exposes their
definitions (name, description, input schema) to the orchestrating agent, and
executes the calls it makes.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Coroutine, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from ...errors import CryptoDataError
from ...providers.alternative_me import FearGreedProvider
from ...providers.coingecko import CoingeckoProvider
from ...providers.defillama import DefiLlamaProvider
from ...tools import defi, market
from ...types import ToolCall, ToolDefinition, ToolEnvelope, ToolResult


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    input_model: Type[BaseModel]
    handler: Callable[..., Coroutine[Any, Any, ToolEnvelope]]


class ToolRegistry:
    """
    Registry of available tools that the LLM can call.

    Each tool has a definition (name, description, parameters), the pydantic
    model its arguments are validated against, and a handler function.
    """

    def __init__(
        self,
        coingecko: Optional[CoingeckoProvider] = None,
        defillama: Optional[DefiLlamaProvider] = None,
        fear_greed: Optional[FearGreedProvider] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.coingecko = coingecko or CoingeckoProvider()
        self.defillama = defillama or DefiLlamaProvider()
        self.fear_greed = fear_greed or FearGreedProvider()
        self._tools: Dict[str, RegisteredTool] = {}
        self.logger = logger or logging.getLogger(__name__)
        self._register_default_tools()

    def register(
        self,
        name: str,
        description: str,
        input_model: Type[BaseModel],
        handler: Callable[..., Coroutine[Any, Any, ToolEnvelope]],
    ) -> None:
        """Register a tool with its description, input model and handler."""
        self._tools[name] = RegisteredTool(
            definition=ToolDefinition.from_model(name, description, input_model),
            input_model=input_model,
            handler=handler,
        )

    def get_definitions(self) -> List[ToolDefinition]:
        """Get all tool definitions for passing to the LLM."""
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        """Get a registered tool by name."""
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def providers(self) -> Dict[str, Any]:
        return {
            self.coingecko.name: self.coingecko,
            self.defillama.name: self.defillama,
            self.fear_greed.name: self.fear_greed,
        }

    def _register_default_tools(self) -> None:
        """Register the default set of tools."""
        cg = self.coingecko
        llama = self.defillama

        # === Crypto market (CoinGecko) ===
        self.register(
            "search_crypto_tokens",
            (
                "Search for cryptocurrency tokens by name or symbol. Returns matching tokens with their "
                "CoinGecko IDs, symbols, and market cap ranks. Use this to find the correct token ID before "
                'fetching detailed data. Example: searching "ethereum" returns ETH and related tokens.'
            ),
            market.SearchTokensInput,
            partial(market.search_crypto_tokens, cg),
        )
        self.register(
            "get_trending_crypto",
            (
                "Get the top 7 trending cryptocurrencies on CoinGecko based on search popularity in the "
                "last 24 hours. Great for discovering what's hot in the market right now."
            ),
            market.NoArguments,
            partial(market.get_trending_crypto, cg),
        )
        self.register(
            "get_crypto_token_info",
            (
                "Get comprehensive information about a cryptocurrency token including current price, "
                "market cap, volume, supply data, price changes, all-time high/low, and description. "
                "Use the CoinGecko ID (e.g., 'bitcoin', 'ethereum', 'solana') - search first if unsure."
            ),
            market.TokenIdInput,
            partial(market.get_crypto_token_info, cg),
        )
        self.register(
            "get_crypto_price",
            (
                "Get current price, market cap, and 24h volume for one or more cryptocurrencies. "
                "Fast endpoint for quick price checks. Use CoinGecko IDs."
            ),
            market.PriceInput,
            partial(market.get_crypto_price, cg),
        )
        self.register(
            "get_crypto_ohlc",
            (
                "Get OHLC (Open, High, Low, Close) candlestick data for a cryptocurrency. Candle size "
                "depends on the range: 1-2 days = 30min candles, 3-90 days = 4hr candles, "
                "91+ days = daily candles."
            ),
            market.OHLCInput,
            partial(market.get_crypto_ohlc, cg),
        )
        self.register(
            "get_crypto_price_history",
            (
                "Get historical price data for a cryptocurrency summarized as first/last price, overall "
                "change and up to 20 sampled points. Good for trend analysis. Data granularity: "
                "1 day = 5min, 2-90 days = hourly, 90+ days = daily."
            ),
            market.PriceHistoryInput,
            partial(market.get_crypto_price_history, cg),
        )
        self.register(
            "get_global_crypto_data",
            (
                "Get global cryptocurrency market data including total market cap, BTC dominance, "
                "ETH dominance, number of active cryptocurrencies, and market cap changes."
            ),
            market.NoArguments,
            partial(market.get_global_crypto_data, cg),
        )
        self.register(
            "get_top_crypto_coins",
            (
                "Get the top cryptocurrencies by market cap with price, volume, and price change data. "
                "Great for market overview and comparing major tokens."
            ),
            market.TopCoinsInput,
            partial(market.get_top_crypto_coins, cg),
        )
        self.register(
            "get_crypto_fear_greed",
            (
                "Get the Crypto Fear & Greed Index - a sentiment indicator from 0 (Extreme Fear) to "
                "100 (Extreme Greed). Shows current value and recent history. Useful for understanding "
                "market sentiment."
            ),
            market.NoArguments,
            partial(market.get_crypto_fear_greed, self.fear_greed),
        )
        self.register(
            "get_crypto_categories",
            (
                "Get cryptocurrency categories/sectors with their market caps and volume. Categories "
                "include DeFi, Layer 1, Layer 2, Meme coins, Gaming, AI, etc. Useful for sector analysis."
            ),
            market.NoArguments,
            partial(market.get_crypto_categories, cg),
        )
        self.register(
            "get_crypto_by_sector",
            (
                "Get cryptocurrencies in a specific category/sector. Use get_crypto_categories first to "
                'find category IDs. Examples: "layer-1", "decentralized-finance-defi", "meme-token", '
                '"artificial-intelligence".'
            ),
            market.SectorInput,
            partial(market.get_crypto_by_sector, cg),
        )
        self.register(
            "get_crypto_exchanges",
            (
                "Get top cryptocurrency exchanges by trading volume. Shows trust score, 24h volume, "
                "and year established. Useful for understanding where liquidity is."
            ),
            market.ExchangesInput,
            partial(market.get_crypto_exchanges, cg),
        )

        # === DeFi analytics (DefiLlama) ===
        self.register(
            "get_top_defi_protocols",
            (
                "Get top DeFi protocols by Total Value Locked (TVL). Shows protocol name, TVL, chain, "
                "category, and TVL changes. Great for understanding where capital is deployed in DeFi."
            ),
            defi.TopProtocolsInput,
            partial(defi.get_top_defi_protocols, llama),
        )
        self.register(
            "get_defi_protocol_detail",
            (
                "Get detailed information about a specific DeFi protocol including TVL history, chain "
                'breakdown, and token info. Use the protocol slug (e.g., "aave", "uniswap", "lido").'
            ),
            defi.ProtocolInput,
            partial(defi.get_defi_protocol_detail, llama),
        )
        self.register(
            "get_chain_tvl_data",
            (
                "Get TVL (Total Value Locked) data for all blockchain networks. Shows which chains have "
                "the most DeFi activity and capital."
            ),
            market.NoArguments,
            partial(defi.get_chain_tvl_data, llama),
        )
        self.register(
            "get_chain_tvl_trend",
            (
                "Get historical TVL trend for a specific blockchain over the last 90 days. Shows how TVL "
                "has changed for chains like Ethereum, Solana, Arbitrum, etc."
            ),
            defi.ChainInput,
            partial(defi.get_chain_tvl_trend, llama),
        )
        self.register(
            "get_defi_yields",
            (
                "Get top DeFi yield opportunities (staking, lending, LPing) sorted by APY. Shows APY, TVL, "
                "and impermanent-loss risk for pools across protocols and chains."
            ),
            defi.YieldsInput,
            partial(defi.get_defi_yields, llama),
        )
        self.register(
            "get_stablecoin_data",
            (
                "Get data on major stablecoins including market cap, peg type and mechanism, price, and "
                "chain distribution. Includes USDT, USDC, DAI, FRAX, etc."
            ),
            market.NoArguments,
            partial(defi.get_stablecoin_data, llama),
        )
        self.register(
            "get_dex_volume_data",
            (
                "Get DEX (Decentralized Exchange) trading volume data. Shows volume by protocol "
                "(Uniswap, Curve, etc.) and chain. Useful for understanding DEX activity and liquidity."
            ),
            market.NoArguments,
            partial(defi.get_dex_volume_data, llama),
        )
        self.register(
            "compare_defi_protocols",
            (
                "Compare up to 5 DeFi protocols side by side (TVL, 30-day TVL change, chain count). "
                "Useful for analyzing competing protocols such as Aave vs Compound. A protocol that "
                "cannot be fetched is reported individually without failing the comparison."
            ),
            defi.CompareProtocolsInput,
            partial(defi.compare_defi_protocols, llama),
        )


class ToolExecutor:
    """
    Executes tool calls requested by the LLM.

    Supports parallel execution of independent tool calls. Failures are
    reported as failed ToolResults; nothing is retried.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    async def execute_single(self, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call and return the result."""
        tool = self.registry.get_tool(tool_call.name)

        if not tool:
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=f"Unknown tool: {tool_call.name}",
                error_type="unknown_tool",
            )

        try:
            arguments = tool.input_model.model_validate(tool_call.arguments)
        except ValidationError as e:
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=f"Invalid arguments for {tool_call.name}: {e}",
                error_type="validation_error",
            )

        try:
            envelope = await tool.handler(**dict(arguments))
        except CryptoDataError as e:
            self.logger.warning(f"Tool {tool_call.name} failed ({e.error_type}): {e}")
            return ToolResult(
                tool_call_id=tool_call.id,
                result={"source_urls": [e.url]} if e.url else None,
                error=str(e),
                error_type=e.error_type,
            )
        except Exception as e:
            self.logger.error(f"Tool execution error for {tool_call.name}: {e}")
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=str(e),
                error_type="internal_error",
            )

        return ToolResult(
            tool_call_id=tool_call.id,
            result=envelope.model_dump(mode="json"),
            error=None,
        )

    async def execute_parallel(self, tool_calls: List[ToolCall]) -> List[ToolResult]:
        """Execute multiple tool calls in parallel."""
        if not tool_calls:
            return []

        tasks = [self.execute_single(tc) for tc in tool_calls]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        final_results = []
        for i, result in enumerate(results):
            if isinstance(result, Exception):
                final_results.append(ToolResult(
                    tool_call_id=tool_calls[i].id,
                    result=None,
                    error=str(result),
                    error_type="internal_error",
                ))
            else:
                final_results.append(result)

        return final_results
