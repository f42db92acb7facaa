import logging
from abc import ABC
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..config import settings
from ..errors import NetworkError, RateLimited, UpstreamError
from ..types import ApiResponse


logger = logging.getLogger(__name__)


def quote_segment(value: str) -> str:
    """Percent-encode a user-supplied path segment, slashes included."""
    return quote(str(value), safe="")


def bool_param(value: bool) -> str:
    return "true" if value else "false"


class Provider(ABC):
    """Base provider: one GET per call, JSON in, ApiResponse out."""

    name: str
    default_base_url: str = ""
    health_path: str = "/"

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.request_timeout_seconds
        self._transport = transport

    def build_url(self, path: str, params: Optional[Dict[str, Any]] = None, *, base_url: Optional[str] = None) -> str:
        """Join base and path and encode the query string."""
        base = (base_url or self.base_url).rstrip("/")
        url = httpx.URL(f"{base}{path}")
        if params:
            url = url.copy_merge_params({k: v for k, v in params.items() if v is not None})
        return str(url)

    async def fetch_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        base_url: Optional[str] = None,
    ) -> ApiResponse:
        """Issue a single GET and map the outcome onto the error taxonomy."""
        url = self.build_url(path, params, base_url=base_url)
        logger.debug(f"{self.name} GET {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as e:
            logger.warning(f"{self.name} network failure for {url}: {e!r}")
            raise NetworkError(f"Network error contacting {self.name}: {e}", url=url) from e

        if response.status_code == 429:
            logger.warning(f"{self.name} rate limited: {url}")
            raise RateLimited(url=url)

        if not response.is_success:
            logger.warning(f"{self.name} returned {response.status_code} for {url}")
            raise UpstreamError(response.status_code, response.reason_phrase, url=url)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, "Invalid JSON body", url=url) from e

        return ApiResponse(data=data, url=url)

    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        try:
            await self.fetch_json(self.health_path, self.health_params())
        except (NetworkError, RateLimited, UpstreamError) as e:
            return {"status": "error", "reason": str(e)}
        return {"status": "healthy"}

    def health_params(self) -> Optional[Dict[str, Any]]:
        return None
