"""Logging initialization.

- Detailed log: append-only file (``weather.log`` in the working directory by default)
- Console: stderr via rich; stdout carries protocol responses only
"""

from __future__ import annotations

import logging
import platform
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_file: str | Path = "weather.log", level: str = "INFO") -> Path:
    """Attach the file and stderr handlers to the root logger.

    Creates the log file if it does not exist. Calling this again is a no-op.

    Returns:
        Resolved path of the log file
    """
    log_path = Path(log_file).resolve()

    if getattr(setup_logging, "_configured", False):
        return log_path

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    log_path.parent.mkdir(parents=True, exist_ok=True)
    if not log_path.exists():
        log_path.write_text(
            f"[{datetime.now().isoformat()}] [INFO] log file created\n", encoding="utf-8"
        )

    file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # noisy lib
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    setup_logging._configured = True  # type: ignore[attr-defined]
    return log_path


def log_startup(logger: logging.Logger) -> None:
    """Write the startup record with host OS and interpreter details."""
    logger.info(
        "Weather service starting | OS: %s %s | Python: %s",
        platform.system(),
        platform.release(),
        sys.version.split()[0],
    )
