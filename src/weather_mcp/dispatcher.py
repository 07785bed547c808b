"""RequestDispatcher — turn one line of input into one JSON-RPC response.

The dispatcher is stateless across lines. For each line it:
1. Decodes the JSON request (parse errors answer with id=null)
2. Resolves the method to a built-in action or a registered tool
3. Validates the arguments against the tool's schema
4. Invokes the handler and wraps its output in a response envelope

Usage:
    dispatcher = RequestDispatcher(registry)
    response = await dispatcher.dispatch('{"jsonrpc":"2.0","id":1,"method":"tools/list"}')
    responses = await dispatcher.dispatch_chunk(chunk_with_many_lines)
"""

from __future__ import annotations

import enum
import inspect
import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from weather_mcp.core.format import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JSONRPCRequest,
    JSONRPCResponse,
    RequestId,
)
from weather_mcp.core.registry import ToolNotFoundError, ToolRegistry, ToolSpec
from weather_mcp.core.schema import ArgumentValidationError, validate_arguments

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "2024-11-05"

_LINE_SPLIT = re.compile(r"\r?\n")


class Action(enum.Enum):
    """Built-in methods handled by the dispatcher itself."""

    LIST_TOOLS = "list_tools"
    CALL_TOOL = "call_tool"
    INITIALIZE = "initialize"
    PING = "ping"


# Several client generations name tool discovery differently.
METHOD_ACTIONS: dict[str, Action] = {
    "mcp.server.listTools": Action.LIST_TOOLS,
    "listTools": Action.LIST_TOOLS,
    "mcp.listTools": Action.LIST_TOOLS,
    "tools/list": Action.LIST_TOOLS,
    "tools/call": Action.CALL_TOOL,
    "initialize": Action.INITIALIZE,
    "ping": Action.PING,
}

DISCOVERY_ALIASES = frozenset(
    method for method, action in METHOD_ACTIONS.items() if action is Action.LIST_TOOLS
)


def split_lines(chunk: str) -> list[str]:
    """Split a chunk of input into its non-blank lines."""
    return [line for line in _LINE_SPLIT.split(chunk) if line.strip()]


class RequestDispatcher:
    """Routes JSON-RPC requests to registered tools.

    Attributes:
        registry: The ToolRegistry consulted for tool methods
        server_info: ``{"name", "version"}`` reported by ``initialize``
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_info: Optional[dict[str, str]] = None,
    ) -> None:
        self.registry = registry
        self.server_info = server_info or {"name": "weather", "version": "0.0.0"}

    async def dispatch_chunk(self, chunk: str) -> list[dict[str, Any]]:
        """Dispatch every non-blank line of ``chunk`` in order.

        A failure on one line never prevents the following lines from being
        processed. Notifications contribute no response.

        Returns:
            Wire-format responses, in input order
        """
        responses: list[dict[str, Any]] = []
        for line in split_lines(chunk):
            response = await self.dispatch(line)
            if response is not None:
                responses.append(response)
        return responses

    async def dispatch(self, line: str) -> Optional[dict[str, Any]]:
        """Dispatch one request line.

        Never raises; every failure becomes an error response.

        Returns:
            The wire-format response dict, or None for notifications
        """
        try:
            response = await self._dispatch(line)
        except Exception:
            logger.exception("Unexpected dispatcher failure")
            response = JSONRPCResponse.failure(None, INTERNAL_ERROR, "Internal error")
        return response.to_wire() if response is not None else None

    async def _dispatch(self, line: str) -> Optional[JSONRPCResponse]:
        try:
            payload = json.loads(line)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("Failed to parse request line: %s", e)
            return JSONRPCResponse.failure(None, PARSE_ERROR, "Parse error")

        request = self._parse_request(payload)
        if isinstance(request, JSONRPCResponse):
            return request

        if request.is_notification:
            logger.debug("Received notification: %s", request.method)
            return None

        return await self.handle_request(request)

    def _parse_request(self, payload: Any) -> JSONRPCRequest | JSONRPCResponse:
        msg_id = payload.get("id") if isinstance(payload, dict) else None
        if not isinstance(payload, dict):
            logger.error("Request is not a JSON object: %r", payload)
            return JSONRPCResponse.failure(None, INVALID_REQUEST, "Invalid Request")
        try:
            return JSONRPCRequest.model_validate(payload)
        except ValidationError as e:
            logger.error("Invalid request envelope: %s", e)
            if not isinstance(msg_id, (str, int, float)):
                msg_id = None
            return JSONRPCResponse.failure(msg_id, INVALID_REQUEST, "Invalid Request")

    async def handle_request(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Route an already-decoded request."""
        logger.debug("Dispatching request: %s (id=%s)", request.method, request.id)
        action = METHOD_ACTIONS.get(request.method)

        if action is Action.LIST_TOOLS:
            return JSONRPCResponse.success(request.id, {"tools": self.registry.list_tools()})
        if action is Action.INITIALIZE:
            return JSONRPCResponse.success(request.id, self._initialize_result(request.params))
        if action is Action.PING:
            return JSONRPCResponse.success(request.id, {})
        if action is Action.CALL_TOOL:
            params = request.params if isinstance(request.params, dict) else {}
            name = params.get("name")
            if not isinstance(name, str) or not name:
                return JSONRPCResponse.failure(
                    request.id, INVALID_PARAMS, "Invalid params: name: expected tool name"
                )
            return await self.call_tool(request.id, name, params.get("arguments"))

        return await self.call_tool(request.id, request.method, request.params)

    async def call_tool(
        self, msg_id: RequestId, name: str, arguments: Any
    ) -> JSONRPCResponse:
        """Validate ``arguments`` and invoke the tool registered as ``name``."""
        try:
            spec = self.registry.lookup(name)
        except ToolNotFoundError:
            logger.error("Method not found: %s", name)
            return JSONRPCResponse.failure(msg_id, METHOD_NOT_FOUND, "Method not found")

        try:
            args = validate_arguments(arguments, spec.schema)
        except ArgumentValidationError as e:
            logger.error("Invalid params for %s: %s", name, e)
            return JSONRPCResponse.failure(msg_id, INVALID_PARAMS, f"Invalid params: {e}")

        try:
            result = await self._invoke(spec, args)
        except Exception:
            logger.exception("Tool %s raised", name)
            return JSONRPCResponse.failure(msg_id, INTERNAL_ERROR, "Internal error")

        return JSONRPCResponse.success(msg_id, result)

    async def _invoke(self, spec: ToolSpec, args: dict[str, Any]) -> Any:
        result = spec.handler(**args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _initialize_result(self, params: Any) -> dict[str, Any]:
        version = DEFAULT_PROTOCOL_VERSION
        if isinstance(params, dict) and isinstance(params.get("protocolVersion"), str):
            version = params["protocolVersion"]
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {}},
            "serverInfo": dict(self.server_info),
        }


__all__ = [
    "RequestDispatcher",
    "Action",
    "METHOD_ACTIONS",
    "DISCOVERY_ALIASES",
    "split_lines",
]
