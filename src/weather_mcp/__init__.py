"""Weather MCP — a line-delimited JSON-RPC tool server for weather and host actions."""

__version__ = "1.0.0"

from weather_mcp.core.format import JSONRPCRequest, JSONRPCResponse
from weather_mcp.core.registry import ToolRegistry, ToolSpec
from weather_mcp.core.schema import FieldSpec, validate_arguments
from weather_mcp.dispatcher import RequestDispatcher

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "ToolRegistry",
    "ToolSpec",
    "FieldSpec",
    "validate_arguments",
    "RequestDispatcher",
]
