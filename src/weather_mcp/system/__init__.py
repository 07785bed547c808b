"""Host OS integration: command construction and execution."""

from .commands import (
    HostCommand,
    OpenUrlAction,
    ScreenshotAction,
    ShutdownAction,
    build_command,
    current_platform,
)
from .runner import CommandResult, CommandRunner

__all__ = [
    "HostCommand",
    "OpenUrlAction",
    "ScreenshotAction",
    "ShutdownAction",
    "build_command",
    "current_platform",
    "CommandResult",
    "CommandRunner",
]
