"""Host tools: shutdown, browser search, screenshots and clock information.

Shell failures are reported back to the caller as text content; only
unexpected exceptions escape to the dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from weather_mcp.system.commands import (
    OpenUrlAction,
    ScreenshotAction,
    ShutdownAction,
    build_command,
    current_platform,
)
from weather_mcp.system.runner import CommandRunner
from weather_mcp.tools.weather import text_content
from weather_mcp.urlfinder import DEFAULT_SEARCH_URL, build_search_url

logger = logging.getLogger(__name__)

PROC_UPTIME = Path("/proc/uptime")

_PROCESS_STARTED = time.monotonic()


def _host_uptime() -> tuple[float, str]:
    """Return (seconds, source): host uptime where readable, else process uptime."""
    try:
        return float(PROC_UPTIME.read_text().split()[0]), "host"
    except (OSError, ValueError, IndexError):
        return time.monotonic() - _PROCESS_STARTED, "process"


class SystemTools:
    """Tool handlers that act on the host OS.

    Attributes:
        runner: Executes the built shell commands
        platform: Command family to build for ("win32", "darwin", "linux")
        screenshot_dir: Where screenshots go when no path is given
        default_search_url: Search template for browser searches
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        platform: Optional[str] = None,
        screenshot_dir: str | Path = ".",
        default_search_url: str = DEFAULT_SEARCH_URL,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.platform = platform or current_platform()
        self.screenshot_dir = Path(screenshot_dir)
        self.default_search_url = default_search_url

    async def shutdown_system(
        self, restart: bool = False, delay: float = 0, force: bool = False
    ) -> dict[str, Any]:
        logger.info(
            "Shutdown requested: %s, delay: %ss, force: %s, platform: %s",
            "restart" if restart else "shutdown",
            delay,
            force,
            self.platform,
        )
        cmd = build_command(ShutdownAction(restart=restart, delay=delay, force=force), self.platform)
        if cmd.pre_delay > 0:
            await asyncio.sleep(cmd.pre_delay)

        result = await self.runner.run(cmd.command)
        if not result.ok:
            return text_content(f"Failed to execute shutdown command: {result.error_message}")

        outcome = "restart" if restart else "shut down"
        suffix = f" in {delay:g} seconds" if delay > 0 else ""
        return text_content(f"Shutdown command executed. The system will {outcome}{suffix}.")

    async def open_browser_search(
        self,
        searchTerm: str,
        url: Optional[str] = None,
        browser: str = "default",
        autoFindUrl: bool = True,
    ) -> dict[str, Any]:
        logger.info(
            "Browser search: %r, url: %s, browser: %s, autoFindUrl: %s",
            searchTerm,
            url,
            browser,
            autoFindUrl,
        )
        target = build_search_url(
            searchTerm,
            url=url,
            auto_find_url=autoFindUrl,
            default_search_url=self.default_search_url,
        )
        cmd = build_command(OpenUrlAction(url=target, browser=browser), self.platform)

        result = await self.runner.run(cmd.command)
        if not result.ok:
            return text_content(f"Failed to open browser: {result.error_message}")

        where = "the default browser" if browser == "default" else browser
        return text_content(f'Opened "{searchTerm}" in {where}: {target}')

    async def capture_screenshot(self, savePath: Optional[str] = None) -> dict[str, Any]:
        if savePath:
            path = Path(savePath).expanduser()
        else:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = self.screenshot_dir / f"screenshot_{stamp}.png"
        if path.suffix.lower() != ".png":
            path = path.with_name(path.name + ".png")
        path = path.resolve()

        logger.info("Capturing screenshot to %s", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return text_content(f"Failed to capture screenshot: {e}")

        cmd = build_command(ScreenshotAction(path=str(path)), self.platform)
        result = await self.runner.run(cmd.command)
        if not result.ok:
            return text_content(f"Failed to capture screenshot: {result.error_message}")
        return text_content(f"Screenshot saved to {path}")

    async def get_system_time(self) -> dict[str, Any]:
        now = datetime.now(timezone.utc).astimezone()
        uptime, source = _host_uptime()
        offset = now.strftime("%z")
        snapshot = {
            "iso_datetime": now.isoformat(),
            "unix_timestamp": int(now.timestamp()),
            "timezone": now.tzname() or str(now.tzinfo),
            "utc_offset": f"{offset[:3]}:{offset[3:]}" if offset else "+00:00",
            "uptime_seconds": round(uptime, 1),
            "uptime_source": source,
        }
        text = "\n".join([
            f"Local time: {snapshot['iso_datetime']}",
            f"Timezone: {snapshot['timezone']} (UTC{snapshot['utc_offset']})",
            f"Unix timestamp: {snapshot['unix_timestamp']}",
            f"Uptime ({source}): {snapshot['uptime_seconds']} seconds",
        ])
        result = text_content(text)
        result["structuredContent"] = snapshot
        return result
