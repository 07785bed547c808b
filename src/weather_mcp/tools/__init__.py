"""Tool handler implementations."""

from .system import SystemTools
from .weather import NWSClient, WeatherTools, text_content

__all__ = ["NWSClient", "SystemTools", "WeatherTools", "text_content"]
