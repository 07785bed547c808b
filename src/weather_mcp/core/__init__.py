"""Core protocol types: envelopes, argument schemas and the tool registry."""

from weather_mcp.core.format import JSONRPCError, JSONRPCRequest, JSONRPCResponse
from weather_mcp.core.registry import ToolRegistry, ToolSpec
from weather_mcp.core.schema import FieldSpec, validate_arguments

__all__ = [
    "JSONRPCError",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "ToolRegistry",
    "ToolSpec",
    "FieldSpec",
    "validate_arguments",
]
