"""Server assembly — build the tool registry and run the stdio loop.

Usage:
    config = ServerConfig()
    asyncio.run(run_server(config))
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, TextIO

from weather_mcp.config import ServerConfig
from weather_mcp.core.registry import ToolRegistry, ToolSpec
from weather_mcp.core.schema import FieldSpec
from weather_mcp.dispatcher import RequestDispatcher
from weather_mcp.logging_setup import log_startup, setup_logging
from weather_mcp.system.commands import BROWSERS
from weather_mcp.system.runner import CommandRunner
from weather_mcp.tools.system import SystemTools
from weather_mcp.tools.weather import NWSClient, WeatherTools
from weather_mcp.transport.stdio import StdioServerTransport

logger = logging.getLogger(__name__)

MINIMAL_TOOL_COUNT = 4


def build_registry(
    config: ServerConfig,
    runner: Optional[CommandRunner] = None,
    weather_client: Optional[NWSClient] = None,
    platform: Optional[str] = None,
) -> ToolRegistry:
    """Register every tool, in a fixed order.

    Args:
        config: Server settings
        runner: Command runner for host tools (a real one when None)
        weather_client: NWS client (built from config when None)
        platform: Command family override, mainly for tests

    Returns:
        A populated ToolRegistry; the "minimal" tool set keeps the first four tools
    """
    client = weather_client or NWSClient(
        base_url=config.nws_api_base,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    weather = WeatherTools(client)
    system = SystemTools(
        runner=runner,
        platform=platform,
        screenshot_dir=config.screenshot_dir,
        default_search_url=config.default_search_url,
    )

    specs = [
        ToolSpec(
            name="get_alerts",
            description="Get weather alerts for a state",
            handler=weather.get_alerts,
            schema={
                "state": FieldSpec(
                    "string",
                    required=True,
                    length=2,
                    description="Two-letter state code (e.g. CA, NY)",
                ),
            },
        ),
        ToolSpec(
            name="get_forecast",
            description="Get weather forecast for a location",
            handler=weather.get_forecast,
            schema={
                "latitude": FieldSpec(
                    "number",
                    required=True,
                    minimum=-90,
                    maximum=90,
                    description="Latitude of the location",
                ),
                "longitude": FieldSpec(
                    "number",
                    required=True,
                    minimum=-180,
                    maximum=180,
                    description="Longitude of the location",
                ),
            },
        ),
        ToolSpec(
            name="shutdown_system",
            description="Shutdown or restart the system (Windows, macOS or Linux)",
            handler=system.shutdown_system,
            schema={
                "restart": FieldSpec(
                    "boolean", default=False, description="True to restart, false to shutdown"
                ),
                "delay": FieldSpec(
                    "number", default=0, minimum=0, description="Delay in seconds before shutdown"
                ),
                "force": FieldSpec(
                    "boolean", default=False, description="Force shutdown without confirmation"
                ),
            },
        ),
        ToolSpec(
            name="open_browser_search",
            description=(
                "Open a browser and search for a term; opens the url instead when one is given"
            ),
            handler=system.open_browser_search,
            schema={
                "url": FieldSpec(
                    "string",
                    description="URL to open; the default search engine is used when omitted",
                ),
                "searchTerm": FieldSpec(
                    "string", required=True, min_length=1, description="Term to search for"
                ),
                "browser": FieldSpec(
                    "enum",
                    default="default",
                    allowed_values=BROWSERS,
                    description="Browser to use",
                ),
                "autoFindUrl": FieldSpec(
                    "boolean",
                    default=True,
                    description="When true, try to infer a website URL from the search term",
                ),
            },
        ),
        ToolSpec(
            name="capture_screenshot",
            description="Capture a screenshot of the screen and save it as a PNG file",
            handler=system.capture_screenshot,
            schema={
                "savePath": FieldSpec(
                    "string",
                    min_length=1,
                    description="File path for the PNG; a timestamped name is used when omitted",
                ),
            },
        ),
        ToolSpec(
            name="get_system_time",
            description="Get the host's current time, timezone and uptime",
            handler=system.get_system_time,
        ),
    ]

    if config.tool_set == "minimal":
        specs = specs[:MINIMAL_TOOL_COUNT]

    registry = ToolRegistry()
    for spec in specs:
        registry.register(spec)
    return registry


async def run_server(
    config: ServerConfig,
    reader: Optional[asyncio.StreamReader] = None,
    writer: Optional[TextIO] = None,
) -> None:
    """Set up logging, register tools and serve stdio until stdin closes.

    Args:
        config: Server settings
        reader: Request stream override (stdin when None)
        writer: Response stream override (stdout when None)

    Raises:
        TransportError: If stdin cannot be attached (a fatal startup failure)
    """
    log_path = setup_logging(config.log_file, config.log_level)
    log_startup(logger)
    logger.info("Logging to %s", log_path)

    client = NWSClient(
        base_url=config.nws_api_base,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    registry = build_registry(config, weather_client=client)
    logger.info("Registered tools: %s", ", ".join(registry.names()))

    dispatcher = RequestDispatcher(registry, server_info=config.server_info)
    transport = StdioServerTransport(dispatcher, reader=reader, writer=writer)
    try:
        await transport.connect()
        logger.info("Weather MCP server running on %s", transport.transport_type)
        await transport.serve()
    finally:
        await client.aclose()
        logger.info("Weather MCP server stopped")


__all__ = ["build_registry", "run_server", "MINIMAL_TOOL_COUNT"]
