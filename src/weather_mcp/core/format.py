"""Wire format — Pydantic models for JSON-RPC 2.0 request/response envelopes.

Every line read from stdin is decoded into a ``JSONRPCRequest`` and every line
written to stdout is rendered from a ``JSONRPCResponse``:
- Requests carry an opaque correlation id (number, string or null)
- Responses echo that id and carry exactly one of ``result`` or ``error``
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes; clients depend on these exact values.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[str, int, float, None]


class JSONRPCMessage(BaseModel):
    """Base class for all JSON-RPC 2.0 messages."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: str = JSONRPC_VERSION


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Optional[Dict[str, Any]] = None


class JSONRPCRequest(JSONRPCMessage):
    """JSON-RPC 2.0 request message."""

    id: RequestId = None
    method: str
    params: Optional[Union[Dict[str, Any], List[Any]]] = None

    @property
    def is_notification(self) -> bool:
        """MCP notifications never get a response."""
        return self.method.startswith("notifications/")


class JSONRPCResponse(JSONRPCMessage):
    """JSON-RPC 2.0 response message.

    ``result`` may legitimately be ``None`` (a handler returning nothing), so
    presence is tracked through the fields explicitly set rather than by value.
    """

    id: RequestId = None
    result: Any = None
    error: Optional[JSONRPCError] = None

    @model_validator(mode="after")
    def validate_result_error(self) -> "JSONRPCResponse":
        """Ensure result and error are mutually exclusive and one is present."""
        has_result = "result" in self.model_fields_set
        has_error = self.error is not None
        if has_result and has_error:
            raise ValueError("response carries both result and error")
        if not has_result and not has_error:
            raise ValueError("response carries neither result nor error")
        return self

    @classmethod
    def success(cls, msg_id: RequestId, result: Any) -> "JSONRPCResponse":
        """Build a success response."""
        return cls(id=msg_id, result=result)

    @classmethod
    def failure(
        cls,
        msg_id: RequestId,
        code: int,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> "JSONRPCResponse":
        """Build an error response."""
        return cls(id=msg_id, error=JSONRPCError(code=code, message=message, data=data))

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> Dict[str, Any]:
        """Render the response as the dict written to the transport.

        Returns:
            ``{"jsonrpc", "id", "result"}`` or ``{"jsonrpc", "id", "error"}``
        """
        message: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.model_dump(exclude_none=True)
        else:
            message["result"] = self.result
        return message


__all__ = [
    "JSONRPC_VERSION",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "RequestId",
    "JSONRPCMessage",
    "JSONRPCError",
    "JSONRPCRequest",
    "JSONRPCResponse",
]
