"""
Crypto market tools: token discovery, prices, history and market overview.

Every tool takes its provider first (bound by the registry) followed by the
fields of its input model, and returns a ToolEnvelope whose source_urls are the
exact provider URLs used.
"""

from __future__ import annotations

import math
from typing import List, Literal, Union

from pydantic import BaseModel, Field

from ..core.agent.entities import resolve_token
from ..providers.alternative_me import FearGreedProvider
from ..providers.coingecko import CoingeckoProvider
from ..types import ToolEnvelope
from .formatting import (
    NOT_AVAILABLE,
    as_dict,
    as_list,
    format_percent,
    head,
    ms_to_iso,
    percent_change,
    seconds_to_date,
    seconds_to_iso,
    to_number,
    truncate,
    upper,
)

MAX_TRENDING = 7
MAX_TOP_COINS = 100
MAX_EXCHANGES = 50
MAX_CATEGORIES = 30
MAX_SECTOR_COINS = 25
PRICE_SAMPLES = 20

FEAR_GREED_BANDS = {
    "0-24": "Extreme Fear - potential buying opportunity",
    "25-49": "Fear - market is worried",
    "50": "Neutral",
    "51-74": "Greed - market is getting greedy",
    "75-100": "Extreme Greed - potential correction ahead",
}


# =============================================================================
# Input models
# =============================================================================

class NoArguments(BaseModel):
    pass


class SearchTokensInput(BaseModel):
    query: str = Field(min_length=1, description='Search query - token name or symbol (e.g., "bitcoin", "ETH", "solana")')


class TokenIdInput(BaseModel):
    token_id: str = Field(
        min_length=1,
        description='CoinGecko token ID (e.g., "bitcoin", "ethereum", "solana"). Use search_crypto_tokens first if unsure.',
    )


class PriceInput(BaseModel):
    token_ids: List[str] = Field(min_length=1, description='Array of CoinGecko token IDs (e.g., ["bitcoin", "ethereum"])')
    vs_currency: str = Field(default="usd", description='Currency to price against (default: "usd")')


class OHLCInput(BaseModel):
    token_id: str = Field(min_length=1, description='CoinGecko token ID (e.g., "bitcoin")')
    days: int = Field(default=30, ge=1, description="Number of days of data (1, 7, 14, 30, 90, 180, 365)")
    vs_currency: str = Field(default="usd", description="Currency to price against")


class PriceHistoryInput(BaseModel):
    token_id: str = Field(min_length=1, description='CoinGecko token ID (e.g., "bitcoin")')
    days: Union[int, Literal["max"]] = Field(default=30, description='Number of days (1, 7, 14, 30, 90, 180, 365, or "max")')
    vs_currency: str = Field(default="usd", description="Currency to price against")


class TopCoinsInput(BaseModel):
    limit: int = Field(default=20, ge=1, description="Number of coins to return (max 100)")
    page: int = Field(default=1, ge=1, description="Page number for pagination")


class SectorInput(BaseModel):
    category_id: str = Field(
        min_length=1,
        description='Category ID from get_crypto_categories (e.g., "layer-1", "decentralized-finance-defi")',
    )


class ExchangesInput(BaseModel):
    limit: int = Field(default=20, ge=1, description="Number of exchanges to return (max 50)")


# =============================================================================
# Token search & discovery
# =============================================================================

async def search_crypto_tokens(provider: CoingeckoProvider, query: str) -> ToolEnvelope:
    response = await provider.search(query)
    payload = as_dict(response.data)
    coins = [
        {
            "id": coin.get("id"),
            "name": coin.get("name"),
            "symbol": upper(coin.get("symbol")),
            "market_cap_rank": coin.get("market_cap_rank"),
        }
        for coin in head(payload.get("coins"), 10)
        if isinstance(coin, dict)
    ]
    result = {
        "coins": coins,
        "categories": head(payload.get("categories"), 5),
        "nfts": head(payload.get("nfts"), 3),
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


async def get_trending_crypto(provider: CoingeckoProvider) -> ToolEnvelope:
    """Top trending coins by search popularity over the last 24h."""
    response = await provider.get_trending()
    coins = []
    for entry in as_list(as_dict(response.data).get("coins")):
        item = as_dict(as_dict(entry).get("item"))
        if not item:
            continue
        coins.append({
            "id": item.get("id"),
            "name": item.get("name"),
            "symbol": upper(item.get("symbol")),
            "market_cap_rank": item.get("market_cap_rank"),
            "price_btc": item.get("price_btc"),
            "score": to_number(item.get("score")),
        })
        if len(coins) >= MAX_TRENDING:
            break
    return ToolEnvelope(data={"trending_coins": coins}, source_urls=[response.url])


# =============================================================================
# Token information
# =============================================================================

async def get_crypto_token_info(provider: CoingeckoProvider, token_id: str) -> ToolEnvelope:
    response = await provider.get_coin(resolve_token(token_id), market_data=True)
    d = as_dict(response.data)
    links = as_dict(d.get("links"))
    market = d.get("market_data")

    market_data = None
    if isinstance(market, dict):
        def usd(key: str):
            return as_dict(market.get(key)).get("usd")

        market_data = {
            "current_price_usd": usd("current_price"),
            "market_cap_usd": usd("market_cap"),
            "market_cap_rank": market.get("market_cap_rank"),
            "fully_diluted_valuation": usd("fully_diluted_valuation"),
            "total_volume_24h": usd("total_volume"),
            "circulating_supply": market.get("circulating_supply"),
            "total_supply": market.get("total_supply"),
            "max_supply": market.get("max_supply"),
            "price_change_24h": format_percent(market.get("price_change_percentage_24h")),
            "price_change_7d": format_percent(market.get("price_change_percentage_7d")),
            "price_change_30d": format_percent(market.get("price_change_percentage_30d")),
            "ath": usd("ath"),
            "ath_change_percentage": format_percent(usd("ath_change_percentage")),
            "ath_date": usd("ath_date"),
            "atl": usd("atl"),
            "atl_date": usd("atl_date"),
        }

    result = {
        "id": d.get("id"),
        "name": d.get("name"),
        "symbol": upper(d.get("symbol")),
        "description": truncate(as_dict(d.get("description")).get("en"), 500),
        "categories": d.get("categories"),
        "links": {
            "homepage": (head(links.get("homepage"), 1) or [None])[0],
            "twitter": links.get("twitter_screen_name"),
            "github": (head(as_dict(links.get("repos_url")).get("github"), 1) or [None])[0],
        },
        "market_data": market_data,
        "genesis_date": d.get("genesis_date"),
        "sentiment_votes_up_percentage": d.get("sentiment_votes_up_percentage"),
        "sentiment_votes_down_percentage": d.get("sentiment_votes_down_percentage"),
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


async def get_crypto_price(
    provider: CoingeckoProvider,
    token_ids: List[str],
    vs_currency: str = "usd",
) -> ToolEnvelope:
    response = await provider.get_simple_price(
        [resolve_token(token_id) for token_id in token_ids],
        [vs_currency.lower()],
        include_market_cap=True,
        include_24hr_vol=True,
        include_24hr_change=True,
    )
    return ToolEnvelope(data=response.data, source_urls=[response.url])


# =============================================================================
# Historical data
# =============================================================================

async def get_crypto_ohlc(
    provider: CoingeckoProvider,
    token_id: str,
    days: int = 30,
    vs_currency: str = "usd",
) -> ToolEnvelope:
    """Candle width follows the range: 30min up to 2 days, 4h up to 90 days, daily beyond."""
    response = await provider.get_ohlc(resolve_token(token_id), vs_currency=vs_currency.lower(), days=days)
    candles = []
    for candle in as_list(response.data):
        if not isinstance(candle, list) or len(candle) < 5:
            continue
        candles.append({
            "timestamp": ms_to_iso(candle[0]),
            "open": candle[1],
            "high": candle[2],
            "low": candle[3],
            "close": candle[4],
        })
    return ToolEnvelope(data={"ohlc": candles, "count": len(candles)}, source_urls=[response.url])


def _price_point(point: list) -> dict:
    return {"date": ms_to_iso(point[0]), "price": point[1]}


async def get_crypto_price_history(
    provider: CoingeckoProvider,
    token_id: str,
    days: Union[int, str] = 30,
    vs_currency: str = "usd",
) -> ToolEnvelope:
    response = await provider.get_market_chart(resolve_token(token_id), vs_currency=vs_currency.lower(), days=days)
    prices = [
        point for point in as_list(as_dict(response.data).get("prices"))
        if isinstance(point, list) and len(point) >= 2
    ]

    step = math.ceil(len(prices) / PRICE_SAMPLES) if prices else 1
    result = {
        "data_points": len(prices),
        "first_price": _price_point(prices[0]) if prices else None,
        "last_price": _price_point(prices[-1]) if prices else None,
        "price_change": percent_change(prices[-1][1], prices[0][1]) if len(prices) >= 2 else NOT_AVAILABLE,
        "sampled_prices": [_price_point(p) for i, p in enumerate(prices) if i % step == 0],
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Market overview
# =============================================================================

async def get_global_crypto_data(provider: CoingeckoProvider) -> ToolEnvelope:
    response = await provider.get_global()
    d = as_dict(as_dict(response.data).get("data"))
    dominance = as_dict(d.get("market_cap_percentage"))
    result = {
        "active_cryptocurrencies": d.get("active_cryptocurrencies"),
        "markets": d.get("markets"),
        "total_market_cap_usd": as_dict(d.get("total_market_cap")).get("usd"),
        "total_volume_24h_usd": as_dict(d.get("total_volume")).get("usd"),
        "btc_dominance": format_percent(dominance.get("btc")),
        "eth_dominance": format_percent(dominance.get("eth")),
        "market_cap_change_24h": format_percent(d.get("market_cap_change_percentage_24h_usd")),
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


async def get_top_crypto_coins(provider: CoingeckoProvider, limit: int = 20, page: int = 1) -> ToolEnvelope:
    limit = min(limit, MAX_TOP_COINS)
    response = await provider.get_markets(vs_currency="usd", per_page=limit, page=page)
    coins = [
        {
            "rank": c.get("market_cap_rank"),
            "id": c.get("id"),
            "symbol": upper(c.get("symbol")),
            "name": c.get("name"),
            "price_usd": c.get("current_price"),
            "market_cap": c.get("market_cap"),
            "volume_24h": c.get("total_volume"),
            "price_change_1h": format_percent(c.get("price_change_percentage_1h_in_currency")),
            "price_change_24h": format_percent(c.get("price_change_percentage_24h")),
            "price_change_7d": format_percent(c.get("price_change_percentage_7d_in_currency")),
            "price_change_30d": format_percent(c.get("price_change_percentage_30d_in_currency")),
            "ath": c.get("ath"),
            "ath_change": format_percent(c.get("ath_change_percentage")),
        }
        for c in head(response.data, limit)
        if isinstance(c, dict)
    ]
    return ToolEnvelope(data={"coins": coins, "count": len(coins)}, source_urls=[response.url])


# =============================================================================
# Market sentiment
# =============================================================================

def _reading_value(reading: dict):
    value = to_number(reading.get("value"))
    return int(value) if value is not None else None


async def get_crypto_fear_greed(provider: FearGreedProvider) -> ToolEnvelope:
    """0 = Extreme Fear, 100 = Extreme Greed."""
    response = await provider.get_fear_greed(limit=10)
    readings = [r for r in as_list(as_dict(response.data).get("data")) if isinstance(r, dict)]
    latest = readings[0] if readings else {}
    result = {
        "current": {
            "value": _reading_value(latest),
            "classification": latest.get("value_classification"),
            "timestamp": seconds_to_iso(latest.get("timestamp")),
        } if latest else None,
        "history": [
            {
                "value": _reading_value(r),
                "classification": r.get("value_classification"),
                "date": seconds_to_date(r.get("timestamp")),
            }
            for r in readings[:7]
        ],
        "interpretation": FEAR_GREED_BANDS,
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Categories & sectors
# =============================================================================

async def get_crypto_categories(provider: CoingeckoProvider) -> ToolEnvelope:
    response = await provider.get_categories()
    categories = [
        {
            "id": c.get("id"),
            "name": c.get("name"),
            "market_cap": c.get("market_cap"),
            "market_cap_change_24h": format_percent(c.get("market_cap_change_24h")),
            "volume_24h": c.get("volume_24h"),
            "top_3_coins": c.get("top_3_coins"),
        }
        for c in head(response.data, MAX_CATEGORIES)
        if isinstance(c, dict)
    ]
    return ToolEnvelope(data={"categories": categories, "count": len(categories)}, source_urls=[response.url])


async def get_crypto_by_sector(provider: CoingeckoProvider, category_id: str) -> ToolEnvelope:
    response = await provider.get_category_markets(category_id)
    coins = [
        {
            "rank": c.get("market_cap_rank"),
            "id": c.get("id"),
            "symbol": upper(c.get("symbol")),
            "name": c.get("name"),
            "price_usd": c.get("current_price"),
            "market_cap": c.get("market_cap"),
            "price_change_24h": format_percent(c.get("price_change_percentage_24h")),
        }
        for c in head(response.data, MAX_SECTOR_COINS)
        if isinstance(c, dict)
    ]
    result = {"category": category_id, "coins": coins, "count": len(coins)}
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Exchanges
# =============================================================================

async def get_crypto_exchanges(provider: CoingeckoProvider, limit: int = 20) -> ToolEnvelope:
    limit = min(limit, MAX_EXCHANGES)
    response = await provider.get_exchanges(per_page=limit)
    exchanges = [
        {
            "rank": e.get("trust_score_rank"),
            "id": e.get("id"),
            "name": e.get("name"),
            "trust_score": e.get("trust_score"),
            "volume_24h_btc": e.get("trade_volume_24h_btc"),
            "year_established": e.get("year_established"),
            "country": e.get("country"),
        }
        for e in head(response.data, limit)
        if isinstance(e, dict)
    ]
    return ToolEnvelope(data={"exchanges": exchanges, "count": len(exchanges)}, source_urls=[response.url])
