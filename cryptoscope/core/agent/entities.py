"""
Entity vocabulary for crypto queries.

Maps the names and tickers people type ("Bitcoin", "MATIC", "Aave") to the
identifiers CoinGecko and DefiLlama expect ("bitcoin", "matic-network", "aave").
The same tables drive the understanding prompt, so the guidance the agent reads
and the lookup enforced here never drift apart.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ...errors import UnknownIdentifierError


class EntityType(str, Enum):
    # Traditional finance
    TICKER = "ticker"
    COMPANY = "company"
    DATE = "date"
    PERIOD = "period"
    METRIC = "metric"
    # Crypto
    TOKEN = "token"
    PROTOCOL = "protocol"
    CHAIN = "chain"
    CATEGORY = "category"
    OTHER = "other"


class QueryDomain(str, Enum):
    STOCKS = "stocks"
    CRYPTO = "crypto"
    DEFI = "defi"
    MIXED = "mixed"


# Lowercased alias -> CoinGecko coin id
TOKEN_IDS: Dict[str, str] = {
    "bitcoin": "bitcoin",
    "btc": "bitcoin",
    "ethereum": "ethereum",
    "eth": "ethereum",
    "ether": "ethereum",
    "solana": "solana",
    "sol": "solana",
    "avalanche": "avalanche-2",
    "avax": "avalanche-2",
    "polygon": "matic-network",
    "matic": "matic-network",
    "arbitrum": "arbitrum",
    "arb": "arbitrum",
    "optimism": "optimism",
    "op": "optimism",
    "bnb": "binancecoin",
    "binance coin": "binancecoin",
    "xrp": "ripple",
    "ripple": "ripple",
    "cardano": "cardano",
    "ada": "cardano",
    "dogecoin": "dogecoin",
    "doge": "dogecoin",
    "toncoin": "the-open-network",
    "ton": "the-open-network",
    "tron": "tron",
    "trx": "tron",
    "polkadot": "polkadot",
    "dot": "polkadot",
    "chainlink": "chainlink",
    "link": "chainlink",
    "litecoin": "litecoin",
    "ltc": "litecoin",
    "shiba inu": "shiba-inu",
    "shib": "shiba-inu",
    "uniswap": "uniswap",
    "uni": "uniswap",
    "aave": "aave",
    "maker": "maker",
    "mkr": "maker",
    "lido dao": "lido-dao",
    "ldo": "lido-dao",
    "near": "near",
    "near protocol": "near",
    "sui": "sui",
    "aptos": "aptos",
    "apt": "aptos",
    "pepe": "pepe",
    "tether": "tether",
    "usdt": "tether",
    "usd coin": "usd-coin",
    "usdc": "usd-coin",
    "dai": "dai",
}

# Lowercased alias -> DefiLlama protocol slug
PROTOCOL_SLUGS: Dict[str, str] = {
    "uniswap": "uniswap",
    "aave": "aave",
    "lido": "lido",
    "makerdao": "makerdao",
    "maker": "makerdao",
    "compound": "compound-finance",
    "compound finance": "compound-finance",
    "curve": "curve-dex",
    "curve finance": "curve-dex",
    "eigenlayer": "eigenlayer",
    "pendle": "pendle",
    "gmx": "gmx",
    "rocket pool": "rocket-pool",
    "convex": "convex-finance",
    "convex finance": "convex-finance",
    "yearn": "yearn-finance",
    "yearn finance": "yearn-finance",
    "pancakeswap": "pancakeswap",
    "sushiswap": "sushi",
    "sushi": "sushi",
    "balancer": "balancer",
    "morpho": "morpho",
}

# Lowercased alias -> DefiLlama chain name
CHAIN_NAMES: Dict[str, str] = {
    "ethereum": "Ethereum",
    "eth": "Ethereum",
    "solana": "Solana",
    "sol": "Solana",
    "arbitrum": "Arbitrum",
    "arb": "Arbitrum",
    "base": "Base",
    "polygon": "Polygon",
    "matic": "Polygon",
    "avalanche": "Avalanche",
    "avax": "Avalanche",
    "bsc": "BSC",
    "bnb chain": "BSC",
    "binance smart chain": "BSC",
    "optimism": "Optimism",
    "op": "Optimism",
    "tron": "Tron",
    "sui": "Sui",
    "bitcoin": "Bitcoin",
}

_TABLES: Dict[EntityType, Dict[str, str]] = {
    EntityType.TOKEN: TOKEN_IDS,
    EntityType.PROTOCOL: PROTOCOL_SLUGS,
    EntityType.CHAIN: CHAIN_NAMES,
}


def _key(value: str) -> str:
    return " ".join(value.strip().lower().replace("_", " ").split())


def _lookup(entity_type: EntityType, value: str) -> Optional[str]:
    table = _TABLES[entity_type]
    key = _key(value)
    if key in table:
        return table[key]
    # Already a provider identifier
    canonical = set(table.values())
    stripped = value.strip()
    if stripped in canonical:
        return stripped
    for identifier in canonical:
        if identifier.lower() == key.replace(" ", "-") or identifier.lower() == key:
            return identifier
    return None


def is_known_identifier(entity_type: EntityType, identifier: str) -> bool:
    table = _TABLES.get(entity_type)
    return table is not None and identifier in set(table.values())


def normalize_token(value: str) -> str:
    """Strict: CoinGecko id for a token name/ticker, or UnknownIdentifierError."""
    resolved = _lookup(EntityType.TOKEN, value)
    if resolved is None:
        raise UnknownIdentifierError("token", value)
    return resolved


def normalize_protocol(value: str) -> str:
    resolved = _lookup(EntityType.PROTOCOL, value)
    if resolved is None:
        raise UnknownIdentifierError("protocol", value)
    return resolved


def normalize_chain(value: str) -> str:
    resolved = _lookup(EntityType.CHAIN, value)
    if resolved is None:
        raise UnknownIdentifierError("chain", value)
    return resolved


def normalize_entity(entity_type: EntityType, value: str) -> Optional[str]:
    """Provider identifier for token/protocol/chain entities; None for the rest."""
    if entity_type not in _TABLES:
        return None
    resolved = _lookup(entity_type, value)
    if resolved is None:
        raise UnknownIdentifierError(entity_type.value, value)
    return resolved


# Lenient variants used by the tools: map what we know, pass the rest through
# so the provider answers (an unknown id comes back as a 404).

def resolve_token(value: str) -> str:
    return _lookup(EntityType.TOKEN, value) or value.strip().lower()


def resolve_protocol(value: str) -> str:
    return _lookup(EntityType.PROTOCOL, value) or value.strip().lower()


def resolve_chain(value: str) -> str:
    return _lookup(EntityType.CHAIN, value) or value.strip()


class Entity(BaseModel):
    type: EntityType = Field(description="The type of entity")
    value: str = Field(description="The raw value from the query")
    normalized: Optional[str] = Field(
        default=None,
        description='Normalized form (e.g., "Bitcoin" -> "bitcoin", "Apple" -> "AAPL")',
    )

    @model_validator(mode="after")
    def _check_normalized(self) -> "Entity":
        if self.normalized is not None and self.type in _TABLES:
            if not is_known_identifier(self.type, self.normalized):
                raise UnknownIdentifierError(self.type.value, self.normalized)
        return self

    @classmethod
    def from_value(cls, entity_type: EntityType, value: str) -> "Entity":
        return cls(type=entity_type, value=value, normalized=normalize_entity(entity_type, value))


class Understanding(BaseModel):
    intent: str = Field(description="A clear statement of what the user wants to accomplish")
    entities: List[Entity] = Field(default_factory=list, description="Key entities extracted from the query")
    domain: Optional[QueryDomain] = Field(default=None, description="Primary domain of the query")


def mapping_guidance(entity_type: EntityType, limit: int = 12, tickers: bool = True) -> str:
    """'BTC->bitcoin, ETH->ethereum, ...' for prompt text; display aliases first."""
    table = _TABLES[entity_type]
    pairs = []
    seen = set()
    for alias, identifier in table.items():
        if alias == identifier.lower() or identifier in seen:
            continue
        seen.add(identifier)
        is_ticker = tickers and len(alias) <= 5 and " " not in alias
        shown = alias.upper() if is_ticker else alias.title()
        pairs.append(f"{shown}->{identifier}")
        if len(pairs) >= limit:
            break
    return ", ".join(pairs)
