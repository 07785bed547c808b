"""Shared fixtures and test utilities for Weather MCP tests."""

import logging
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from weather_mcp.config import ServerConfig
from weather_mcp.core.registry import ToolRegistry, ToolSpec
from weather_mcp.core.schema import FieldSpec
from weather_mcp.dispatcher import RequestDispatcher
from weather_mcp.logging_setup import setup_logging
from weather_mcp.server import build_registry
from weather_mcp.system.runner import CommandResult


# ===== Fakes =====


class FakeRunner:
    """CommandRunner stand-in that records commands instead of running them."""

    def __init__(self, result: Optional[CommandResult] = None) -> None:
        self.result = result or CommandResult(returncode=0)
        self.commands: list[str] = []

    async def run(self, command: str) -> CommandResult:
        self.commands.append(command)
        return self.result


def make_weather_client(responses: Optional[dict[str, Any]] = None) -> MagicMock:
    """NWSClient stand-in whose fetch_json answers from a url -> body mapping."""
    responses = responses or {}
    client = MagicMock()
    client.base_url = "https://api.weather.gov"
    client.fetch_json = AsyncMock(side_effect=lambda url: responses.get(url))
    client.aclose = AsyncMock()
    return client


# ===== Registry / Dispatcher Fixtures =====


@pytest.fixture
def echo_registry() -> ToolRegistry:
    """Small registry covering async, sync and failing handlers."""
    registry = ToolRegistry()

    async def echo(text: str, repeat: float = 1) -> dict[str, Any]:
        return {"content": [{"type": "text", "text": text * int(repeat)}]}

    def add(a: float, b: float) -> float:
        return a + b

    async def boom() -> None:
        raise RuntimeError("handler exploded")

    def nothing() -> None:
        return None

    registry.register(
        ToolSpec(
            name="echo",
            description="Echo text back",
            handler=echo,
            schema={
                "text": FieldSpec("string", required=True, min_length=1),
                "repeat": FieldSpec("number", default=1, minimum=1, maximum=5),
            },
        )
    )
    registry.register(
        ToolSpec(
            name="add",
            description="Add two numbers",
            handler=add,
            schema={
                "a": FieldSpec("number", required=True),
                "b": FieldSpec("number", required=True),
            },
        )
    )
    registry.register(ToolSpec(name="boom", description="Always fails", handler=boom))
    registry.register(ToolSpec(name="nothing", description="Returns None", handler=nothing))
    return registry


@pytest.fixture
def dispatcher(echo_registry: ToolRegistry) -> RequestDispatcher:
    """Dispatcher over the echo registry."""
    return RequestDispatcher(echo_registry, server_info={"name": "test-server", "version": "1.0.0"})


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Runner that always succeeds."""
    return FakeRunner()


@pytest.fixture
def weather_client() -> MagicMock:
    """Weather client with no canned responses (every fetch fails)."""
    return make_weather_client()


@pytest.fixture
def client_factory():
    """Build weather clients with canned url -> body responses."""
    return make_weather_client


@pytest.fixture
def full_registry(fake_runner: FakeRunner, weather_client: MagicMock) -> ToolRegistry:
    """The production tool set wired to fakes, building Linux commands."""
    return build_registry(
        ServerConfig(),
        runner=fake_runner,
        weather_client=weather_client,
        platform="linux",
    )


@pytest.fixture
def full_dispatcher(full_registry: ToolRegistry) -> RequestDispatcher:
    """Dispatcher over the production tool set."""
    return RequestDispatcher(full_registry)


# ===== Logging =====


@pytest.fixture
def clean_logging():
    """Undo setup_logging's global changes after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    setup_logging._configured = False  # type: ignore[attr-defined]
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    setup_logging._configured = False  # type: ignore[attr-defined]
