from datetime import datetime, timezone
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class ApiResponse(BaseModel):
    """Raw provider JSON paired with the URL it came from."""

    model_config = ConfigDict(frozen=True)

    data: Any = Field(description="Parsed JSON body")
    url: str = Field(description="Exact request URL, query string included")


class ToolEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: Any = Field(description="Tool result data")
    source_urls: List[str] = Field(description="Provider URLs the data was derived from")
    fetched_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When data was fetched",
    )
    warnings: List[str] = Field(default_factory=list, description="Any warnings or issues")
