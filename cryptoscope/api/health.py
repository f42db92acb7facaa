import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..core.agent.tools import ToolExecutor
from .tools import get_tool_executor

router = APIRouter()


@router.get("/healthz")
async def health_check(executor: ToolExecutor = Depends(get_tool_executor)) -> Dict[str, Any]:
    """Health check endpoint that pings every upstream provider"""

    providers = executor.registry.providers()
    statuses = await asyncio.gather(*(provider.health_check() for provider in providers.values()))
    provider_status = dict(zip(providers.keys(), statuses))

    available_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "healthy"
    )

    return {
        "status": "healthy" if available_providers == len(provider_status) else "degraded",
        "providers": provider_status,
        "available_providers": available_providers,
        "total_providers": len(provider_status),
    }
