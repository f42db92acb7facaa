import json
import types
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, Field


# =============================================================================
# Tool Calling Models
# =============================================================================

class ToolParameterType(str, Enum):
    """Supported parameter types for tool definitions"""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ToolParameter(BaseModel):
    """Definition of a single tool parameter"""
    name: str
    type: ToolParameterType
    description: str
    required: bool = True
    enum: Optional[List[str]] = None
    default: Optional[Any] = None
    items: Optional[ToolParameterType] = None  # element type for ARRAY parameters


def _describe_annotation(
    annotation: Any,
) -> Tuple[ToolParameterType, Optional[List[str]], Optional[ToolParameterType]]:
    """Map a pydantic field annotation to (type, enum, items)."""
    origin = get_origin(annotation)

    if origin in (Union, types.UnionType):
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return _describe_annotation(args[0])
        # Mixed unions such as int | "max" are passed as strings and coerced on validation
        return ToolParameterType.STRING, None, None

    if origin is Literal:
        return ToolParameterType.STRING, [str(v) for v in get_args(annotation)], None

    if origin is list:
        args = get_args(annotation)
        item_type = _describe_annotation(args[0])[0] if args else ToolParameterType.STRING
        return ToolParameterType.ARRAY, None, item_type

    if annotation is bool:
        return ToolParameterType.BOOLEAN, None, None
    if annotation is int:
        return ToolParameterType.INTEGER, None, None
    if annotation is float:
        return ToolParameterType.NUMBER, None, None
    if annotation is str:
        return ToolParameterType.STRING, None, None
    return ToolParameterType.OBJECT, None, None


class ToolDefinition(BaseModel):
    """Definition of a tool that can be called by the LLM"""
    name: str
    description: str
    parameters: List[ToolParameter] = Field(default_factory=list)

    @classmethod
    def from_model(cls, name: str, description: str, model: Type[BaseModel]) -> "ToolDefinition":
        """Build the LLM-facing definition from a tool's pydantic input model."""
        parameters = []
        for field_name, info in model.model_fields.items():
            param_type, enum, items = _describe_annotation(info.annotation)
            required = info.is_required()
            parameters.append(
                ToolParameter(
                    name=field_name,
                    type=param_type,
                    description=info.description or "",
                    required=required,
                    enum=enum,
                    default=None if required else info.get_default(call_default_factory=True),
                    items=items,
                )
            )
        return cls(name=name, description=description, parameters=parameters)

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic's tool schema format"""
        properties = {}
        required = []

        for param in self.parameters:
            prop: Dict[str, Any] = {
                "type": param.type.value,
                "description": param.description,
            }
            if param.enum:
                prop["enum"] = param.enum
            if param.default is not None:
                prop["default"] = param.default
            if param.type == ToolParameterType.ARRAY:
                prop["items"] = {"type": (param.items or ToolParameterType.STRING).value}

            properties[param.name] = prop

            if param.required:
                required.append(param.name)

        return {
            "name": self.name,
            "description": self.description,
            "input_schema": {
                "type": "object",
                "properties": properties,
                "required": required,
            }
        }


class ToolCall(BaseModel):
    """A tool call requested by the LLM"""
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Result of executing a tool"""
    tool_call_id: str
    result: Any
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_anthropic_format(self) -> Dict[str, Any]:
        """Convert to Anthropic's tool_result format"""
        content = self.error if self.error else self.result
        if not isinstance(content, str):
            content = json.dumps(content)
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_call_id,
            "content": content,
            "is_error": self.error is not None,
        }
