from typing import Any, Dict, Optional, Sequence, Union

from ..config import settings
from ..types import ApiResponse
from .base import Provider, bool_param, quote_segment


class CoingeckoProvider(Provider):
    """CoinGecko public API (free tier, no key). Roughly 10-30 calls per minute."""

    name = "coingecko"
    health_path = "/ping"

    def __init__(self, base_url: Optional[str] = None, **kwargs: Any):
        super().__init__(base_url or settings.coingecko_base_url, **kwargs)

    async def search(self, query: str) -> ApiResponse:
        """Search coins, categories and NFTs by name or symbol."""
        return await self.fetch_json("/search", {"query": query})

    async def get_coin(
        self,
        coin_id: str,
        *,
        localization: bool = False,
        tickers: bool = False,
        market_data: bool = True,
        community_data: bool = False,
        developer_data: bool = False,
    ) -> ApiResponse:
        params = {
            "localization": bool_param(localization),
            "tickers": bool_param(tickers),
            "market_data": bool_param(market_data),
            "community_data": bool_param(community_data),
            "developer_data": bool_param(developer_data),
        }
        return await self.fetch_json(f"/coins/{quote_segment(coin_id)}", params)

    async def get_simple_price(
        self,
        coin_ids: Sequence[str],
        vs_currencies: Sequence[str] = ("usd",),
        *,
        include_market_cap: bool = True,
        include_24hr_vol: bool = True,
        include_24hr_change: bool = True,
    ) -> ApiResponse:
        params = {
            "ids": ",".join(coin_ids),
            "vs_currencies": ",".join(vs_currencies),
            "include_market_cap": bool_param(include_market_cap),
            "include_24hr_vol": bool_param(include_24hr_vol),
            "include_24hr_change": bool_param(include_24hr_change),
        }
        return await self.fetch_json("/simple/price", params)

    async def get_ohlc(self, coin_id: str, *, vs_currency: str = "usd", days: int = 30) -> ApiResponse:
        """Candles as [timestamp_ms, open, high, low, close]."""
        params = {"vs_currency": vs_currency, "days": days}
        return await self.fetch_json(f"/coins/{quote_segment(coin_id)}/ohlc", params)

    async def get_market_chart(
        self,
        coin_id: str,
        *,
        vs_currency: str = "usd",
        days: Union[int, str] = 30,
    ) -> ApiResponse:
        params = {"vs_currency": vs_currency, "days": days}
        return await self.fetch_json(f"/coins/{quote_segment(coin_id)}/market_chart", params)

    async def get_trending(self) -> ApiResponse:
        return await self.fetch_json("/search/trending")

    async def get_global(self) -> ApiResponse:
        return await self.fetch_json("/global")

    async def get_markets(
        self,
        *,
        vs_currency: str = "usd",
        per_page: int = 50,
        page: int = 1,
        order: str = "market_cap_desc",
        category: Optional[str] = None,
        price_change_percentage: Optional[str] = "1h,24h,7d,30d",
    ) -> ApiResponse:
        params: Dict[str, Any] = {
            "vs_currency": vs_currency,
            "order": order,
            "per_page": per_page,
            "page": page,
            "sparkline": "false",
        }
        if category:
            params["category"] = category
        if price_change_percentage:
            params["price_change_percentage"] = price_change_percentage
        return await self.fetch_json("/coins/markets", params)

    async def get_categories(self) -> ApiResponse:
        return await self.fetch_json("/coins/categories")

    async def get_category_markets(self, category_id: str, *, vs_currency: str = "usd") -> ApiResponse:
        """First page (50) of coins in a category, by market cap."""
        return await self.get_markets(
            vs_currency=vs_currency,
            per_page=50,
            page=1,
            category=category_id,
            price_change_percentage=None,
        )

    async def get_exchanges(self, *, per_page: int = 20) -> ApiResponse:
        return await self.fetch_json("/exchanges", {"per_page": per_page})
