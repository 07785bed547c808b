"""Tests for per-platform host command construction and the command runner."""

import sys

import pytest

from weather_mcp.system.commands import (
    HostCommand,
    OpenUrlAction,
    ScreenshotAction,
    ShutdownAction,
    build_command,
    current_platform,
)
from weather_mcp.system.runner import CommandResult, CommandRunner


class TestShutdownCommand:
    """Shutdown and restart commands per platform."""

    @pytest.mark.parametrize(
        "action,expected",
        [
            (ShutdownAction(), "shutdown /s /t 0"),
            (ShutdownAction(restart=True, delay=30), "shutdown /r /t 30"),
            (ShutdownAction(force=True, delay=5.9), "shutdown /s /f /t 5"),
        ],
    )
    def test_windows(self, action, expected):
        assert build_command(action, "win32") == HostCommand(expected)

    def test_macos_shutdown(self):
        cmd = build_command(ShutdownAction(delay=10), "darwin")
        assert cmd.command == "osascript -e 'tell app \"System Events\" to shut down'"
        assert cmd.pre_delay == 10

    def test_macos_forced_restart(self):
        cmd = build_command(ShutdownAction(restart=True, force=True), "darwin")
        assert cmd.command == "osascript -e 'tell app \"System Events\" to restart now'"
        assert cmd.pre_delay == 0

    @pytest.mark.parametrize(
        "action,expected",
        [
            (ShutdownAction(), "shutdown -h +0"),
            (ShutdownAction(restart=True, delay=120), "shutdown -r +2"),
            (ShutdownAction(delay=59), "shutdown -h +0"),
            (ShutdownAction(force=True), "shutdown -h +0 now"),
        ],
    )
    def test_linux(self, action, expected):
        """Delay is rounded down to whole minutes."""
        assert build_command(action, "linux").command == expected

    def test_unknown_platform_uses_unix_commands(self):
        assert build_command(ShutdownAction(), "freebsd").command == "shutdown -h +0"


class TestScreenshotCommand:
    """Screenshot commands per platform."""

    def test_windows_powershell(self):
        cmd = build_command(ScreenshotAction("C:\\shots\\a.png"), "win32").command
        assert cmd.startswith('powershell -NoProfile -Command "')
        assert "CopyFromScreen" in cmd
        assert "$bmp.Save('C:\\shots\\a.png'" in cmd

    def test_windows_path_quotes_neutralised(self):
        cmd = build_command(ScreenshotAction("C:\\it's\".png"), "win32").command
        assert "$bmp.Save('C:\\it''s.png'" in cmd

    def test_macos(self):
        cmd = build_command(ScreenshotAction("/tmp/shot.png"), "darwin")
        assert cmd.command == "screencapture -x /tmp/shot.png"

    def test_linux_with_fallback(self):
        cmd = build_command(ScreenshotAction("/tmp/my shot.png"), "linux").command
        assert cmd == (
            "gnome-screenshot -f '/tmp/my shot.png' || import -window root '/tmp/my shot.png'"
        )


class TestOpenUrlCommand:
    """Browser launch commands per platform."""

    @pytest.mark.parametrize(
        "browser,expected",
        [
            ("default", 'start "" "https://example.com"'),
            ("chrome", 'start chrome "https://example.com"'),
            ("firefox", 'start firefox "https://example.com"'),
            ("edge", 'start msedge "https://example.com"'),
            ("safari", 'start "" "https://example.com"'),
        ],
    )
    def test_windows(self, browser, expected):
        action = OpenUrlAction("https://example.com", browser)
        assert build_command(action, "win32").command == expected

    def test_windows_strips_embedded_quotes(self):
        action = OpenUrlAction('https://x.com/?q="a" & calc')
        assert build_command(action, "win32").command == 'start "" "https://x.com/?q=a & calc"'

    @pytest.mark.parametrize(
        "browser,expected",
        [
            ("default", "open https://example.com"),
            ("chrome", "open -a 'Google Chrome' https://example.com"),
            ("firefox", "open -a Firefox https://example.com"),
            ("safari", "open -a Safari https://example.com"),
            ("edge", "open -a 'Microsoft Edge' https://example.com"),
        ],
    )
    def test_macos(self, browser, expected):
        action = OpenUrlAction("https://example.com", browser)
        assert build_command(action, "darwin").command == expected

    @pytest.mark.parametrize(
        "browser,expected",
        [
            ("default", "xdg-open https://example.com"),
            ("chrome", "google-chrome https://example.com || xdg-open https://example.com"),
            ("firefox", "firefox https://example.com || xdg-open https://example.com"),
            ("edge", "xdg-open https://example.com"),
        ],
    )
    def test_linux(self, browser, expected):
        action = OpenUrlAction("https://example.com", browser)
        assert build_command(action, "linux").command == expected

    def test_shell_metacharacters_quoted(self):
        """Client-supplied URLs cannot inject commands into a POSIX shell."""
        action = OpenUrlAction("https://a.com/?q=1;rm -rf ~")
        assert build_command(action, "linux").command == "xdg-open 'https://a.com/?q=1;rm -rf ~'"


class TestBuildCommand:
    def test_unknown_action(self):
        with pytest.raises(TypeError):
            build_command("reboot", "linux")  # type: ignore[arg-type]

    def test_current_platform(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        assert current_platform() == "win32"
        monkeypatch.setattr(sys, "platform", "darwin")
        assert current_platform() == "darwin"
        monkeypatch.setattr(sys, "platform", "linux")
        assert current_platform() == "linux"


class TestCommandResult:
    def test_error_message_preference(self):
        assert CommandResult(1, stdout="out", stderr="err\n").error_message == "err"
        assert CommandResult(1, stdout="out").error_message == "out"
        assert CommandResult(2).error_message == "exit code 2"

    def test_ok(self):
        assert CommandResult(0).ok
        assert not CommandResult(1).ok


@pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX shell commands")
class TestCommandRunner:
    """CommandRunner against a real shell."""

    @pytest.mark.asyncio
    async def test_success(self):
        result = await CommandRunner().run("echo hello")
        assert result.ok
        assert result.stdout.strip() == "hello"

    @pytest.mark.asyncio
    async def test_failure_captures_stderr(self):
        result = await CommandRunner().run("echo broken >&2; exit 3")
        assert result.returncode == 3
        assert result.error_message == "broken"
