"""Tool registry — maps tool names to their description, schema and handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from weather_mcp.core.schema import Schema, to_input_schema

logger = logging.getLogger(__name__)


class DuplicateToolError(ValueError):
    """Raised when registering a name that is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' is already registered")


class ToolNotFoundError(KeyError):
    """Raised when looking up a name that was never registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Tool '{self.name}' is not registered"


@dataclass(frozen=True)
class ToolSpec:
    """A named, schema-described callable.

    Attributes:
        name: Unique tool name, also usable as a JSON-RPC method
        description: Shown to clients in the discovery listing
        schema: Mapping of argument name to FieldSpec
        handler: Sync or async callable invoked with validated arguments as kwargs
    """

    name: str
    description: str
    handler: Callable[..., Any]
    schema: Schema = field(default_factory=dict)

    def describe(self) -> dict[str, Any]:
        """Return the discovery descriptor for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": to_input_schema(self.schema),
        }


class ToolRegistry:
    """Ordered collection of ToolSpecs.

    Registration order is preserved and is the order tools are listed in.
    The registry is populated once at startup and only read afterwards.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> ToolSpec:
        """Add a tool.

        Raises:
            DuplicateToolError: If a tool with the same name exists
        """
        if spec.name in self._tools:
            raise DuplicateToolError(spec.name)
        self._tools[spec.name] = spec
        logger.debug("Registered tool: %s", spec.name)
        return spec

    def tool(
        self,
        name: Optional[str] = None,
        description: str = "",
        schema: Optional[Schema] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register``.

        Example:
            @registry.tool(description="Echo text", schema={"text": FieldSpec("string", required=True)})
            async def echo(text): ...
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(
                ToolSpec(
                    name=name or func.__name__,
                    description=description or (func.__doc__ or "").strip(),
                    handler=func,
                    schema=dict(schema or {}),
                )
            )
            return func

        return decorator

    def lookup(self, name: str) -> ToolSpec:
        """Return the ToolSpec for ``name``.

        Raises:
            ToolNotFoundError: If no such tool is registered
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def list_tools(self) -> list[dict[str, Any]]:
        """Return discovery descriptors in registration order."""
        return [spec.describe() for spec in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())


__all__ = ["ToolSpec", "ToolRegistry", "DuplicateToolError", "ToolNotFoundError"]
