"""Weather tools backed by the US National Weather Service API.

Upstream failures never raise out of a tool; they come back as text content
describing what went wrong.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

logger = logging.getLogger(__name__)

NWS_API_BASE = "https://api.weather.gov"
USER_AGENT = "weather-app/1.0"


def text_content(text: str) -> dict[str, Any]:
    """Wrap text in an MCP tool result."""
    return {"content": [{"type": "text", "text": text}]}


def _value(props: dict[str, Any], key: str, fallback: str = "Unknown") -> Any:
    value = props.get(key)
    return fallback if value is None or value == "" else value


def _object(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _objects(value: Any) -> list[dict[str, Any]]:
    """Keep the dict entries of a JSON array; anything else yields nothing."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def format_alert(feature: dict[str, Any]) -> str:
    """Format one alert feature as a block of text."""
    props = _object(feature.get("properties"))
    return "\n".join([
        f"Event: {_value(props, 'event')}",
        f"Area: {_value(props, 'areaDesc')}",
        f"Severity: {_value(props, 'severity')}",
        f"Status: {_value(props, 'status')}",
        f"Headline: {_value(props, 'headline', 'No headline')}",
        "---",
    ])


def format_period(period: dict[str, Any]) -> str:
    """Format one forecast period as a block of text."""
    return "\n".join([
        f"{_value(period, 'name')}:",
        f"Temperature: {_value(period, 'temperature')}°{_value(period, 'temperatureUnit', 'F')}",
        f"Wind: {_value(period, 'windSpeed')} {_value(period, 'windDirection', '')}",
        f"{_value(period, 'shortForecast', 'No forecast available')}",
        "---",
    ])


class NWSClient:
    """Thin async client for the NWS API.

    The aiohttp session is created lazily on first request so the client can
    be constructed outside a running event loop.
    """

    def __init__(
        self,
        base_url: str = NWS_API_BASE,
        user_agent: str = USER_AGENT,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/geo+json"}

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def fetch_json(self, url: str) -> Optional[dict[str, Any]]:
        """GET ``url`` and decode the JSON body.

        Returns:
            The decoded body, or None on a non-2xx status, network error or
            a body that is not a JSON object
        """
        try:
            async with self._get_session().get(url) as resp:
                logger.info("API request: %s, status: %d", url, resp.status)
                if resp.status < 200 or resp.status >= 300:
                    logger.error("API request failed: %s, status: %d", url, resp.status)
                    return None
                body = await resp.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error("API request error: %s, error: %s %s", url, type(e).__name__, e)
            return None
        if not isinstance(body, dict):
            logger.error("API request returned %s, expected an object: %s", type(body).__name__, url)
            return None
        return body

    async def aclose(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None


class WeatherTools:
    """Tool handlers for alerts and forecasts.

    Responses of an unexpected shape are treated like missing data, so every
    outcome is a text result.
    """

    def __init__(self, client: NWSClient) -> None:
        self.client = client

    async def get_alerts(self, state: str) -> dict[str, Any]:
        state_code = state.upper()
        logger.info("Fetching weather alerts for state %s", state_code)

        data = await self.client.fetch_json(
            f"{self.client.base_url}/alerts?area={quote(state_code, safe='')}"
        )
        if not data or not isinstance(data, dict):
            logger.error("No alerts data for state %s", state_code)
            return text_content("Failed to retrieve alerts data")

        features = _objects(data.get("features"))
        if not features:
            logger.info("No active alerts for state %s", state_code)
            return text_content(f"No active alerts for {state_code}")

        logger.info("Found %d active alerts for state %s", len(features), state_code)
        alerts = "\n".join(format_alert(f) for f in features)
        return text_content(f"Active alerts for {state_code}:\n\n{alerts}")

    async def get_forecast(self, latitude: float, longitude: float) -> dict[str, Any]:
        logger.info("Fetching forecast for (%s, %s)", latitude, longitude)

        points_url = f"{self.client.base_url}/points/{latitude:.4f},{longitude:.4f}"
        points = await self.client.fetch_json(points_url)
        if not points or not isinstance(points, dict):
            logger.error("No grid point data for (%s, %s)", latitude, longitude)
            return text_content(
                f"Failed to retrieve grid point data for coordinates: {latitude}, {longitude}. "
                "This location may not be supported by the NWS API "
                "(only US locations are supported)."
            )

        forecast_url = _object(points.get("properties")).get("forecast")
        if not forecast_url or not isinstance(forecast_url, str):
            return text_content("Failed to get forecast URL from grid point data")

        forecast = await self.client.fetch_json(forecast_url)
        if not forecast or not isinstance(forecast, dict):
            return text_content("Failed to retrieve forecast data")

        periods = _objects(_object(forecast.get("properties")).get("periods"))
        if not periods:
            return text_content("No forecast periods available")

        body = "\n".join(format_period(p) for p in periods)
        return text_content(f"Forecast for {latitude}, {longitude}:\n\n{body}")
