from typing import Any, Dict, Optional

from ..config import settings
from ..types import ApiResponse
from .base import Provider


class FearGreedProvider(Provider):
    """alternative.me Crypto Fear & Greed Index (0-100)."""

    name = "alternative.me"
    health_path = "/fng/"

    def __init__(self, base_url: Optional[str] = None, **kwargs: Any):
        super().__init__(base_url or settings.fear_greed_base_url, **kwargs)

    async def get_fear_greed(self, *, limit: int = 10) -> ApiResponse:
        """Most recent readings first."""
        return await self.fetch_json("/fng/", {"limit": limit})

    def health_params(self) -> Optional[Dict[str, Any]]:
        return {"limit": 1}
