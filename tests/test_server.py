"""Tests for server assembly and the end-to-end stdio loop."""

import asyncio
import io
import json

import pytest

from weather_mcp.config import ServerConfig
from weather_mcp.server import MINIMAL_TOOL_COUNT, build_registry, run_server

FULL_TOOLS = [
    "get_alerts",
    "get_forecast",
    "shutdown_system",
    "open_browser_search",
    "capture_screenshot",
    "get_system_time",
]


class TestBuildRegistry:
    """Tests for tool registration."""

    def test_full_tool_set_order(self, full_registry):
        assert full_registry.names() == FULL_TOOLS

    def test_minimal_tool_set(self, fake_runner, weather_client):
        registry = build_registry(
            ServerConfig(tool_set="minimal"),
            runner=fake_runner,
            weather_client=weather_client,
            platform="linux",
        )
        assert registry.names() == FULL_TOOLS[:MINIMAL_TOOL_COUNT]

    def test_input_schemas(self, full_registry):
        schemas = {t["name"]: t["inputSchema"] for t in full_registry.list_tools()}

        assert schemas["get_alerts"]["required"] == ["state"]
        assert schemas["get_alerts"]["properties"]["state"]["minLength"] == 2
        assert schemas["get_forecast"]["required"] == ["latitude", "longitude"]
        assert schemas["get_forecast"]["properties"]["longitude"]["maximum"] == 180
        assert schemas["shutdown_system"]["required"] == []
        assert schemas["shutdown_system"]["properties"]["delay"]["default"] == 0
        assert schemas["open_browser_search"]["required"] == ["searchTerm"]
        assert schemas["open_browser_search"]["properties"]["browser"]["enum"] == [
            "default",
            "chrome",
            "firefox",
            "safari",
            "edge",
        ]
        assert schemas["capture_screenshot"]["required"] == []
        assert schemas["get_system_time"] == {"type": "object", "properties": {}, "required": []}

    def test_every_tool_has_description(self, full_registry):
        for tool in full_registry.list_tools():
            assert tool["description"]


class TestFullDispatcher:
    """The production tool set through the dispatcher."""

    @pytest.mark.asyncio
    async def test_shutdown_defaults(self, full_dispatcher, fake_runner):
        response = await full_dispatcher.dispatch(
            '{"jsonrpc":"2.0","id":1,"method":"shutdown_system","params":{}}'
        )
        assert "result" in response
        assert fake_runner.commands == ["shutdown -h +0"]

    @pytest.mark.asyncio
    async def test_unknown_browser_rejected(self, full_dispatcher, fake_runner):
        response = await full_dispatcher.dispatch(
            '{"jsonrpc":"2.0","id":1,"method":"open_browser_search",'
            '"params":{"searchTerm":"x","browser":"opera"}}'
        )
        assert response["error"]["code"] == -32602
        assert fake_runner.commands == []

    @pytest.mark.asyncio
    async def test_empty_search_term_rejected(self, full_dispatcher, fake_runner):
        response = await full_dispatcher.dispatch(
            '{"jsonrpc":"2.0","id":1,"method":"open_browser_search","params":{"searchTerm":""}}'
        )
        assert response["error"]["code"] == -32602
        assert fake_runner.commands == []


class TestRunServer:
    """run_server over injected streams."""

    @pytest.mark.asyncio
    async def test_serves_until_eof(self, tmp_path, clean_logging):
        log_file = tmp_path / "logs" / "weather.log"
        config = ServerConfig(log_file=str(log_file), server_version="9.9.9")

        reader = asyncio.StreamReader()
        reader.feed_data(
            b'{"jsonrpc":"2.0","id":0,"method":"initialize","params":{}}\n'
            b'{"jsonrpc":"2.0","id":1,"method":"tools/list","params":{}}\n'
            b"not json\n"
        )
        reader.feed_eof()
        writer = io.StringIO()

        await run_server(config, reader=reader, writer=writer)

        responses = [json.loads(line) for line in writer.getvalue().splitlines()]
        assert [r["id"] for r in responses] == [0, 1, None]
        assert responses[0]["result"]["serverInfo"] == {"name": "weather", "version": "9.9.9"}
        assert [t["name"] for t in responses[1]["result"]["tools"]] == FULL_TOOLS
        assert responses[2]["error"]["code"] == -32700

        log_text = log_file.read_text(encoding="utf-8")
        assert "log file created" in log_text
        assert "Weather service starting" in log_text

    @pytest.mark.asyncio
    async def test_minimal_tool_set(self, tmp_path, clean_logging):
        config = ServerConfig(log_file=str(tmp_path / "w.log"), tool_set="minimal")
        reader = asyncio.StreamReader()
        reader.feed_data(b'{"jsonrpc":"2.0","id":1,"method":"listTools"}\n')
        reader.feed_eof()
        writer = io.StringIO()

        await run_server(config, reader=reader, writer=writer)

        (response,) = [json.loads(line) for line in writer.getvalue().splitlines()]
        assert len(response["result"]["tools"]) == MINIMAL_TOOL_COUNT
