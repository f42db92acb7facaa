from .alternative_me import FearGreedProvider
from .base import Provider
from .coingecko import CoingeckoProvider
from .defillama import DefiLlamaProvider

__all__ = [
    "Provider",
    "CoingeckoProvider",
    "DefiLlamaProvider",
    "FearGreedProvider",
]
