"""Per-platform shell command construction for host actions.

All string concatenation that ends up in a shell lives here. Every value
supplied by a client (URLs, file paths) is quoted for the target shell:
``shlex.quote`` for POSIX shells, stripped-and-double-quoted for cmd.exe.

Usage:
    cmd = build_command(ShutdownAction(restart=True, delay=60), "linux")
    cmd.command   # 'shutdown -r +1'
"""

from __future__ import annotations

import shlex
import sys
from dataclasses import dataclass
from typing import Literal, Union

Platform = Literal["win32", "darwin", "linux"]

BROWSERS = ("default", "chrome", "firefox", "safari", "edge")


def current_platform() -> Platform:
    """Map ``sys.platform`` onto the three command families."""
    if sys.platform.startswith("win"):
        return "win32"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


@dataclass(frozen=True)
class ShutdownAction:
    restart: bool = False
    delay: float = 0
    force: bool = False


@dataclass(frozen=True)
class ScreenshotAction:
    path: str


@dataclass(frozen=True)
class OpenUrlAction:
    url: str
    browser: str = "default"


HostAction = Union[ShutdownAction, ScreenshotAction, OpenUrlAction]


@dataclass(frozen=True)
class HostCommand:
    """A shell command plus how long to wait before running it.

    Attributes:
        command: Command line for the platform shell
        pre_delay: Seconds to sleep before running (for platforms whose
            command has no native delay)
    """

    command: str
    pre_delay: float = 0.0


def build_command(action: HostAction, platform: str) -> HostCommand:
    """Translate a host action into a command for ``platform``.

    Unknown platforms get the Linux/Unix commands.

    Raises:
        TypeError: If ``action`` is not a known host action
    """
    if isinstance(action, ShutdownAction):
        return _shutdown_command(action, platform)
    if isinstance(action, ScreenshotAction):
        return HostCommand(_screenshot_command(action.path, platform))
    if isinstance(action, OpenUrlAction):
        return HostCommand(_open_url_command(action.url, action.browser, platform))
    raise TypeError(f"Unsupported host action: {type(action).__name__}")


def _win_quote(value: str) -> str:
    # cmd.exe has no escape for '"' inside a quoted argument
    return '"' + value.replace('"', "") + '"'


def _shutdown_command(action: ShutdownAction, platform: str) -> HostCommand:
    delay = int(action.delay)
    if platform == "win32":
        cmd = "shutdown " + ("/r" if action.restart else "/s")
        if action.force:
            cmd += " /f"
        return HostCommand(f"{cmd} /t {delay}")

    if platform == "darwin":
        verb = "restart" if action.restart else "shut down"
        script = f'tell app "System Events" to {verb}'
        if action.force:
            script += " now"
        # osascript has no delay option; the caller sleeps first
        return HostCommand(f"osascript -e '{script}'", pre_delay=float(delay))

    cmd = f"shutdown {'-r' if action.restart else '-h'} +{delay // 60}"
    if action.force:
        cmd += " now"
    return HostCommand(cmd)


def _screenshot_command(path: str, platform: str) -> str:
    if platform == "win32":
        ps_path = path.replace('"', "").replace("'", "''")
        script = (
            "Add-Type -AssemblyName System.Windows.Forms,System.Drawing; "
            "$b=[System.Windows.Forms.SystemInformation]::VirtualScreen; "
            "$bmp=New-Object System.Drawing.Bitmap $b.Width,$b.Height; "
            "$g=[System.Drawing.Graphics]::FromImage($bmp); "
            "$g.CopyFromScreen($b.Location,[System.Drawing.Point]::Empty,$b.Size); "
            f"$bmp.Save('{ps_path}',[System.Drawing.Imaging.ImageFormat]::Png)"
        )
        return f'powershell -NoProfile -Command "{script}"'

    quoted = shlex.quote(path)
    if platform == "darwin":
        return f"screencapture -x {quoted}"
    return f"gnome-screenshot -f {quoted} || import -window root {quoted}"


_WIN_BROWSERS = {"chrome": "chrome", "firefox": "firefox", "edge": "msedge"}
_MAC_BROWSERS = {
    "chrome": "Google Chrome",
    "firefox": "Firefox",
    "safari": "Safari",
    "edge": "Microsoft Edge",
}
_UNIX_BROWSERS = {"chrome": "google-chrome", "firefox": "firefox"}


def _open_url_command(url: str, browser: str, platform: str) -> str:
    if platform == "win32":
        exe = _WIN_BROWSERS.get(browser)
        if exe:
            return f"start {exe} {_win_quote(url)}"
        # first quoted argument to start is the window title
        return f'start "" {_win_quote(url)}'

    quoted = shlex.quote(url)
    if platform == "darwin":
        app = _MAC_BROWSERS.get(browser)
        if app:
            return f"open -a {shlex.quote(app)} {quoted}"
        return f"open {quoted}"

    exe = _UNIX_BROWSERS.get(browser)
    if exe:
        return f"{exe} {quoted} || xdg-open {quoted}"
    return f"xdg-open {quoted}"


__all__ = [
    "Platform",
    "BROWSERS",
    "ShutdownAction",
    "ScreenshotAction",
    "OpenUrlAction",
    "HostAction",
    "HostCommand",
    "build_command",
    "current_platform",
]
