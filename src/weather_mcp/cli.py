"""Weather MCP CLI interface for serving, listing and calling tools."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Optional

import click
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from weather_mcp import __version__
from weather_mcp.config import LOG_LEVELS, ServerConfig, load_config
from weather_mcp.dispatcher import RequestDispatcher
from weather_mcp.server import build_registry, run_server
from weather_mcp.tools.weather import NWSClient
from weather_mcp.transport.base import TransportError

# stdout belongs to the protocol while serving
console = Console(stderr=True)
out = Console()

logger = logging.getLogger(__name__)


def _resolve_config(config_path: Optional[str], **overrides: Any) -> ServerConfig:
    try:
        base = load_config(config_path) if config_path else ServerConfig()
        return base.with_overrides(**overrides)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Weather MCP - serve weather and host tools over line-delimited JSON-RPC."""
    pass


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="WEATHER_MCP_CONFIG",
    help="Path to a JSON config file",
)
@click.option(
    "--log-file",
    default=None,
    envvar="WEATHER_MCP_LOG_FILE",
    help="Append-only log file (default: weather.log in the working directory)",
)
@click.option(
    "--log-level",
    type=click.Choice(sorted(LOG_LEVELS), case_sensitive=False),
    default=None,
    envvar="WEATHER_MCP_LOG_LEVEL",
    help="Log level (default: INFO)",
)
@click.option(
    "--nws-api-base",
    default=None,
    envvar="WEATHER_MCP_NWS_API_BASE",
    help="National Weather Service API root URL",
)
@click.option(
    "--tool-set",
    type=click.Choice(["full", "minimal"]),
    default=None,
    envvar="WEATHER_MCP_TOOL_SET",
    help="'full' registers all six tools, 'minimal' only weather, shutdown and browser",
)
@click.option(
    "--screenshot-dir",
    type=click.Path(file_okay=False),
    default=None,
    envvar="WEATHER_MCP_SCREENSHOT_DIR",
    help="Directory for screenshots taken without an explicit path",
)
def serve(
    config_path: str | None,
    log_file: str | None,
    log_level: str | None,
    nws_api_base: str | None,
    tool_set: str | None,
    screenshot_dir: str | None,
) -> None:
    """Serve tools over stdio (one JSON-RPC request per line).

    Example:
        weather-mcp serve
        weather-mcp serve --tool-set minimal --log-level DEBUG
    """
    config = _resolve_config(
        config_path,
        log_file=log_file,
        log_level=log_level,
        nws_api_base=nws_api_base,
        tool_set=tool_set,
        screenshot_dir=screenshot_dir,
    )
    try:
        asyncio.run(run_server(config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Server interrupted by user[/yellow]")
        sys.exit(0)
    except TransportError as e:
        logger.error("Failed to start stdio transport: %s", e)
        console.print(f"[bold red]Fatal:[/bold red] {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception("Fatal error in server")
        console.print(f"[bold red]Fatal:[/bold red] {e}")
        sys.exit(1)


@cli.command()
@click.option(
    "--tool-set",
    type=click.Choice(["full", "minimal"]),
    default="full",
    help="Which tool set to list",
)
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list result as JSON")
def tools(tool_set: str, as_json: bool) -> None:
    """List the registered tools and their arguments."""
    registry = build_registry(ServerConfig(tool_set=tool_set))
    descriptors = registry.list_tools()

    if as_json:
        click.echo(json.dumps({"tools": descriptors}, indent=2, ensure_ascii=False))
        return

    table = Table(title=f"Tools ({tool_set})")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required", style="green")
    table.add_column("Optional", style="dim")
    for tool in descriptors:
        schema = tool["inputSchema"]
        required = schema["required"]
        optional = [name for name in schema["properties"] if name not in required]
        table.add_row(
            tool["name"],
            tool["description"],
            ", ".join(required) or "-",
            ", ".join(optional) or "-",
        )
    out.print(table)


@cli.command()
@click.argument("name")
@click.option(
    "--args",
    "args_json",
    default="{}",
    help='Tool arguments as a JSON object, e.g. \'{"state": "CA"}\'',
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    envvar="WEATHER_MCP_CONFIG",
    help="Path to a JSON config file",
)
def call(name: str, args_json: str, config_path: str | None) -> None:
    """Invoke one tool locally and print the JSON-RPC response.

    Example:
        weather-mcp call get_forecast --args '{"latitude": 38.9, "longitude": -77.0}'
        weather-mcp call get_system_time
    """
    try:
        arguments = json.loads(args_json)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"--args is not valid JSON: {e}")

    config = _resolve_config(config_path)
    request = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }

    async def run_once() -> Optional[dict[str, Any]]:
        client = NWSClient(
            base_url=config.nws_api_base,
            user_agent=config.user_agent,
            timeout=config.request_timeout,
        )
        registry = build_registry(config, weather_client=client)
        dispatcher = RequestDispatcher(registry, server_info=config.server_info)
        try:
            return await dispatcher.dispatch(json.dumps(request))
        finally:
            await client.aclose()

    response = asyncio.run(run_once())
    out.print(JSON(json.dumps(response, ensure_ascii=False)))
    if response is None or "error" in response:
        sys.exit(1)
