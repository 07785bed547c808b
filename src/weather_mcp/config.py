"""Server configuration.

Settings come from three layers, later ones winning:
defaults on ``ServerConfig`` → an optional JSON config file → CLI options
(which click also fills from ``WEATHER_MCP_*`` environment variables).

Config JSON: { "nws_api_base"?, "user_agent"?, "request_timeout"?, "log_file"?,
"log_level"?, "default_search_url"?, "screenshot_dir"?, "tool_set"? }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from weather_mcp import __version__

ToolSet = Literal["full", "minimal"]

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ServerConfig(BaseModel):
    """Runtime settings for the weather MCP server."""

    model_config = ConfigDict(extra="forbid")

    nws_api_base: str = Field(
        default="https://api.weather.gov", description="National Weather Service API root"
    )
    user_agent: str = Field(
        default="weather-app/1.0", description="User-Agent header sent to the NWS API"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Total timeout in seconds for one HTTP request"
    )
    log_file: str = Field(default="weather.log", description="Append-only log file path")
    log_level: str = Field(default="INFO", description="Root log level")
    default_search_url: str = Field(
        default="https://www.bing.com/search?q={query}",
        description="Search template used when no site can be inferred",
    )
    screenshot_dir: str = Field(
        default=".", description="Directory for screenshots without an explicit path"
    )
    tool_set: ToolSet = Field(
        default="full", description="'full' registers all tools, 'minimal' the first four"
    )
    server_name: str = Field(default="weather", description="Name reported by initialize")
    server_version: str = Field(default=__version__, description="Version reported by initialize")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(sorted(LOG_LEVELS))}")
        return level

    @field_validator("nws_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with every non-None override applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        return ServerConfig.model_validate({**self.model_dump(), **updates})

    @property
    def server_info(self) -> dict[str, str]:
        return {"name": self.server_name, "version": self.server_version}


def load_config(path: str | Path) -> ServerConfig:
    """Load a server config JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or has invalid settings
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a JSON object")
    try:
        return ServerConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config {path}: {e}") from e


__all__ = ["ServerConfig", "ToolSet", "load_config"]
