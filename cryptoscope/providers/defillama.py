from typing import Any, Optional

from ..config import settings
from ..types import ApiResponse
from .base import Provider, quote_segment


class DefiLlamaProvider(Provider):
    """
    DefiLlama open API.

    Core data (protocols, chains, DEX volumes) lives on api.llama.fi; yield pools
    and stablecoins are served from their own hosts.
    """

    name = "defillama"
    health_path = "/v2/chains"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        yields_base_url: Optional[str] = None,
        stablecoins_base_url: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(base_url or settings.defillama_base_url, **kwargs)
        self.yields_base_url = (yields_base_url or settings.defillama_yields_base_url).rstrip("/")
        self.stablecoins_base_url = (stablecoins_base_url or settings.defillama_stablecoins_base_url).rstrip("/")

    async def get_protocols(self) -> ApiResponse:
        """All protocols with current TVL and 1d/7d/1m change."""
        return await self.fetch_json("/protocols")

    def protocol_url(self, slug: str) -> str:
        return self.build_url(f"/protocol/{quote_segment(slug)}")

    async def get_protocol(self, slug: str) -> ApiResponse:
        """Protocol detail including the 'tvl' array of {date, totalLiquidityUSD}."""
        return await self.fetch_json(f"/protocol/{quote_segment(slug)}")

    async def get_chains(self) -> ApiResponse:
        return await self.fetch_json("/v2/chains")

    async def get_chain_tvl_history(self, chain: str) -> ApiResponse:
        """Daily {date, tvl} points for one chain."""
        return await self.fetch_json(f"/v2/historicalChainTvl/{quote_segment(chain)}")

    async def get_yield_pools(self) -> ApiResponse:
        return await self.fetch_json("/pools", base_url=self.yields_base_url)

    async def get_stablecoins(self) -> ApiResponse:
        return await self.fetch_json(
            "/stablecoins",
            {"includePrices": "true"},
            base_url=self.stablecoins_base_url,
        )

    async def get_dex_overview(self) -> ApiResponse:
        params = {
            "excludeTotalDataChart": "true",
            "excludeTotalDataChartBreakdown": "true",
        }
        return await self.fetch_json("/overview/dexs", params)
