"""Run shell commands and capture their outcome."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error_message(self) -> str:
        """Best available description of a failure."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


class CommandRunner:
    """Runs commands through the platform shell.

    No timeout is applied: a command that never exits stalls its caller.
    """

    async def run(self, command: str) -> CommandResult:
        logger.info("Executing: %s", command)
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to start command: %s", e)
            return CommandResult(returncode=-1, stderr=str(e))

        stdout, stderr = await process.communicate()
        result = CommandResult(
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if not result.ok:
            logger.error("Command failed (code %d): %s", result.returncode, result.error_message)
        return result
