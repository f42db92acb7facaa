import uuid
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException

from ..core.agent.tools import ToolExecutor, ToolRegistry
from ..types import ToolCall, ToolResult

router = APIRouter(prefix="/tools")

ERROR_STATUS: Dict[str, int] = {
    "unknown_tool": 404,
    "validation_error": 422,
    "rate_limited": 429,
    "upstream_error": 502,
    "network_error": 503,
    "internal_error": 500,
}


@lru_cache(maxsize=1)
def get_tool_executor() -> ToolExecutor:
    return ToolExecutor(ToolRegistry())


@router.get("")
async def list_tools(executor: ToolExecutor = Depends(get_tool_executor)) -> List[Dict[str, Any]]:
    """Tool definitions in Anthropic tool schema format"""
    return [definition.to_anthropic_format() for definition in executor.registry.get_definitions()]


@router.post("/{name}")
async def invoke_tool(
    name: str,
    arguments: Dict[str, Any] = Body(default_factory=dict),
    executor: ToolExecutor = Depends(get_tool_executor),
) -> ToolResult:
    """Run one tool with a JSON object of arguments"""
    result = await executor.execute_single(
        ToolCall(id=f"http_{uuid.uuid4().hex[:8]}", name=name, arguments=arguments)
    )
    if result.error:
        raise HTTPException(
            status_code=ERROR_STATUS.get(result.error_type or "", 500),
            detail={"error": result.error, "error_type": result.error_type, "result": result.result},
        )
    return result
