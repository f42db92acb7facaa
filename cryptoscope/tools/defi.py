"""DeFi tools: TVL, protocols, yields, stablecoins and DEX volumes via DefiLlama."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.agent.entities import resolve_chain, resolve_protocol
from ..errors import CryptoDataError
from ..providers.defillama import DefiLlamaProvider
from ..types import ToolEnvelope
from .formatting import (
    NOT_AVAILABLE,
    as_dict,
    as_list,
    format_percent,
    head,
    last,
    percent_change,
    seconds_to_date,
    sort_key,
    to_number,
    truncate,
)

logger = logging.getLogger(__name__)

MAX_PROTOCOLS = 100
MAX_POOLS = 100
MAX_CHAINS = 30
MAX_STABLECOINS = 20
MAX_DEX_PROTOCOLS = 20
MAX_COMPARED = 5
PROTOCOL_HISTORY_POINTS = 30
CHAIN_HISTORY_POINTS = 90
COMPARE_FAILURE = "Failed to fetch data"


# =============================================================================
# Input models
# =============================================================================

class TopProtocolsInput(BaseModel):
    limit: int = Field(default=25, ge=1, description="Number of protocols to return (max 100)")
    chain: Optional[str] = Field(default=None, description='Filter by chain (e.g., "Ethereum", "Solana", "Arbitrum")')
    category: Optional[str] = Field(
        default=None,
        description='Filter by category (e.g., "DEX", "Lending", "Bridge", "Liquid Staking")',
    )


class ProtocolInput(BaseModel):
    protocol: str = Field(min_length=1, description='Protocol slug/name (e.g., "aave", "uniswap", "lido", "makerdao")')


class ChainInput(BaseModel):
    chain: str = Field(min_length=1, description='Chain name (e.g., "Ethereum", "Solana", "Arbitrum", "BSC", "Polygon")')


class YieldsInput(BaseModel):
    chain: Optional[str] = Field(default=None, description='Filter by chain (e.g., "Ethereum", "Arbitrum")')
    project: Optional[str] = Field(default=None, description='Filter by protocol (e.g., "aave", "compound")')
    min_tvl: Optional[float] = Field(default=None, ge=0, description="Minimum TVL in USD")
    stablecoin_only: bool = Field(default=False, description="Only show stablecoin pools")
    limit: int = Field(default=20, ge=1, description="Number of pools to return (max 100)")


class CompareProtocolsInput(BaseModel):
    protocols: List[str] = Field(
        min_length=1,
        description='Array of protocol slugs to compare, at most 5 (e.g., ["aave", "compound", "maker"])',
    )


def _latest_tvl(points: Any) -> Optional[float]:
    point = last(as_list(points))
    return to_number(as_dict(point).get("totalLiquidityUSD")) if point is not None else None


# =============================================================================
# Protocol TVL
# =============================================================================

async def get_top_defi_protocols(
    provider: DefiLlamaProvider,
    limit: int = 25,
    chain: Optional[str] = None,
    category: Optional[str] = None,
) -> ToolEnvelope:
    response = await provider.get_protocols()
    protocols = [p for p in as_list(response.data) if isinstance(p, dict)]

    if chain:
        chain_lower = resolve_chain(chain).lower()
        protocols = [
            p for p in protocols
            if str(p.get("chain") or "").lower() == chain_lower
            or any(str(c).lower() == chain_lower for c in as_list(p.get("chains")))
        ]

    if category:
        category_lower = category.strip().lower()
        protocols = [p for p in protocols if category_lower in str(p.get("category") or "").lower()]

    protocols.sort(key=lambda p: sort_key(p.get("tvl")), reverse=True)
    protocols = protocols[:min(limit, MAX_PROTOCOLS)]

    result = [
        {
            "name": p.get("name"),
            "symbol": p.get("symbol"),
            "tvl": p.get("tvl"),
            "tvl_change_1d": format_percent(p.get("change_1d")),
            "tvl_change_7d": format_percent(p.get("change_7d")),
            "tvl_change_1m": format_percent(p.get("change_1m")),
            "category": p.get("category"),
            "chains": head(p.get("chains"), 5),
            "slug": p.get("slug"),
        }
        for p in protocols
    ]
    return ToolEnvelope(data={"protocols": result, "count": len(result)}, source_urls=[response.url])


async def get_defi_protocol_detail(provider: DefiLlamaProvider, protocol: str) -> ToolEnvelope:
    response = await provider.get_protocol(resolve_protocol(protocol))
    d = as_dict(response.data)
    tvl_points = [p for p in as_list(d.get("tvl")) if isinstance(p, dict)]

    tvl_by_chain: Dict[str, float] = {}
    for chain_name, chain_data in as_dict(d.get("chainTvls")).items():
        series = as_dict(chain_data).get("tvl") if isinstance(chain_data, dict) else chain_data
        if isinstance(series, list):
            tvl_by_chain[chain_name] = _latest_tvl(series) or 0

    history = [
        {"date": seconds_to_date(point.get("date")), "tvl": point.get("totalLiquidityUSD")}
        for point in tvl_points[-PROTOCOL_HISTORY_POINTS:]
    ]

    current_tvl = _latest_tvl(tvl_points)
    mcap = to_number(d.get("mcap"))
    result = {
        "name": d.get("name"),
        "symbol": d.get("symbol"),
        "description": truncate(d.get("description"), 500),
        "category": d.get("category"),
        "chains": d.get("chains"),
        "current_tvl": current_tvl,
        "tvl_by_chain": tvl_by_chain,
        "tvl_history_30d": history,
        "url": d.get("url"),
        "twitter": d.get("twitter"),
        "audit_links": d.get("audit_links"),
        "token": d.get("symbol"),
        "mcap_to_tvl": f"{mcap / current_tvl:.2f}" if mcap and current_tvl else None,
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Chain TVL
# =============================================================================

async def get_chain_tvl_data(provider: DefiLlamaProvider) -> ToolEnvelope:
    response = await provider.get_chains()
    chains = sorted(
        (c for c in as_list(response.data) if isinstance(c, dict)),
        key=lambda c: sort_key(c.get("tvl")),
        reverse=True,
    )[:MAX_CHAINS]
    result = [
        {
            "name": c.get("name"),
            "tvl": c.get("tvl"),
            "token_symbol": c.get("tokenSymbol"),
            "gecko_id": c.get("gecko_id"),
        }
        for c in chains
    ]
    return ToolEnvelope(data={"chains": result, "count": len(result)}, source_urls=[response.url])


async def get_chain_tvl_trend(provider: DefiLlamaProvider, chain: str) -> ToolEnvelope:
    chain_name = resolve_chain(chain)
    response = await provider.get_chain_tvl_history(chain_name)
    history = [
        {"date": seconds_to_date(point.get("date")), "tvl": point.get("tvl")}
        for point in as_list(response.data)[-CHAIN_HISTORY_POINTS:]
        if isinstance(point, dict)
    ]

    first = to_number(history[0]["tvl"]) if history else None
    latest = to_number(history[-1]["tvl"]) if history else None
    result = {
        "chain": chain_name,
        "current_tvl": latest or 0,
        "tvl_90d_ago": first or 0,
        "change_90d": percent_change(latest, first),
        "history": history,
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Yields & pools
# =============================================================================

async def get_defi_yields(
    provider: DefiLlamaProvider,
    chain: Optional[str] = None,
    project: Optional[str] = None,
    min_tvl: Optional[float] = None,
    stablecoin_only: bool = False,
    limit: int = 20,
) -> ToolEnvelope:
    response = await provider.get_yield_pools()
    pools = [p for p in as_list(as_dict(response.data).get("data")) if isinstance(p, dict)]

    if chain:
        chain_lower = resolve_chain(chain).lower()
        pools = [p for p in pools if str(p.get("chain") or "").lower() == chain_lower]

    if project:
        project_lower = project.strip().lower()
        pools = [p for p in pools if project_lower in str(p.get("project") or "").lower()]

    if min_tvl:
        pools = [p for p in pools if sort_key(p.get("tvlUsd")) >= min_tvl]

    if stablecoin_only:
        pools = [p for p in pools if p.get("stablecoin") is True]

    pools.sort(key=lambda p: sort_key(p.get("apy")), reverse=True)
    pools = pools[:min(limit, MAX_POOLS)]

    result = [
        {
            "pool": p.get("pool"),
            "symbol": p.get("symbol"),
            "project": p.get("project"),
            "chain": p.get("chain"),
            "tvl_usd": p.get("tvlUsd"),
            "apy": format_percent(p.get("apy")),
            "apy_base": format_percent(p.get("apyBase")),
            "apy_reward": format_percent(p.get("apyReward")),
            "stablecoin": p.get("stablecoin"),
            "il_risk": p.get("ilRisk"),
        }
        for p in pools
    ]
    return ToolEnvelope(data={"pools": result, "count": len(result)}, source_urls=[response.url])


# =============================================================================
# Stablecoins
# =============================================================================

def _circulating_usd(asset: dict) -> float:
    return sort_key(as_dict(asset.get("circulating")).get("peggedUSD"))


async def get_stablecoin_data(provider: DefiLlamaProvider) -> ToolEnvelope:
    response = await provider.get_stablecoins()
    assets = sorted(
        (a for a in as_list(as_dict(response.data).get("peggedAssets")) if isinstance(a, dict)),
        key=_circulating_usd,
        reverse=True,
    )[:MAX_STABLECOINS]
    stables = [
        {
            "name": a.get("name"),
            "symbol": a.get("symbol"),
            "peg_type": a.get("pegType"),
            "peg_mechanism": a.get("pegMechanism"),
            "circulating": as_dict(a.get("circulating")).get("peggedUSD"),
            "price": a.get("price"),
            "chains": list(as_dict(a.get("chainCirculating")))[:5],
        }
        for a in assets
    ]
    return ToolEnvelope(data={"stablecoins": stables, "count": len(stables)}, source_urls=[response.url])


# =============================================================================
# DEX volumes
# =============================================================================

async def get_dex_volume_data(provider: DefiLlamaProvider) -> ToolEnvelope:
    response = await provider.get_dex_overview()
    d = as_dict(response.data)
    protocols = sorted(
        (p for p in as_list(d.get("protocols")) if isinstance(p, dict)),
        key=lambda p: sort_key(p.get("total24h")),
        reverse=True,
    )[:MAX_DEX_PROTOCOLS]
    result = {
        "total_volume_24h": d.get("total24h"),
        "total_volume_7d": d.get("total7d"),
        "protocols": [
            {
                "name": p.get("name"),
                "volume_24h": p.get("total24h"),
                "volume_7d": p.get("total7d"),
                "volume_30d": p.get("total30d"),
                "change_24h": format_percent(p.get("change_1d")),
                "chains": head(p.get("chains"), 5),
            }
            for p in protocols
        ],
    }
    return ToolEnvelope(data=result, source_urls=[response.url])


# =============================================================================
# Protocol comparison
# =============================================================================

async def _compare_one(provider: DefiLlamaProvider, protocol: str) -> Dict[str, Any]:
    slug = resolve_protocol(protocol)
    try:
        response = await provider.get_protocol(slug)
    except CryptoDataError as e:
        logger.warning(f"compare_defi_protocols: {slug} failed: {e}")
        return {"name": protocol, "error": COMPARE_FAILURE, "error_type": e.error_type}
    except Exception as e:
        logger.error(f"compare_defi_protocols: {slug} failed unexpectedly: {e!r}")
        return {"name": protocol, "error": COMPARE_FAILURE, "error_type": "internal_error"}

    d = as_dict(response.data)
    points = [p for p in as_list(d.get("tvl")) if isinstance(p, dict)]
    current = _latest_tvl(points) or 0
    month_ago = to_number(points[max(0, len(points) - 30)].get("totalLiquidityUSD")) if points else None
    return {
        "name": d.get("name") or protocol,
        "symbol": d.get("symbol"),
        "category": d.get("category"),
        "chains": len(as_list(d.get("chains"))),
        "current_tvl": current,
        "tvl_30d_ago": month_ago or 0,
        "tvl_change_30d": percent_change(current, month_ago),
    }


async def compare_defi_protocols(provider: DefiLlamaProvider, protocols: List[str]) -> ToolEnvelope:
    """Fetch up to five protocols concurrently; a failed fetch is reported per item."""
    selected = protocols[:MAX_COMPARED]
    warnings = []
    if len(protocols) > MAX_COMPARED:
        dropped = ", ".join(protocols[MAX_COMPARED:])
        warnings.append(f"Only the first {MAX_COMPARED} protocols were compared; skipped: {dropped}")

    comparison = list(await asyncio.gather(*(_compare_one(provider, p) for p in selected)))
    for entry in comparison:
        entry.setdefault("tvl_change_30d", NOT_AVAILABLE)

    source_urls = [provider.protocol_url(resolve_protocol(p)) for p in selected]
    return ToolEnvelope(data={"comparison": comparison}, source_urls=source_urls, warnings=warnings)
