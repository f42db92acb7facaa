from .envelope import ApiResponse, ToolEnvelope
from .tool_calling import ToolCall, ToolDefinition, ToolParameter, ToolParameterType, ToolResult

__all__ = [
    "ApiResponse",
    "ToolEnvelope",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolParameterType",
    "ToolResult",
]
