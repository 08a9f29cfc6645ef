"""Logging setup for line-clamp."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"
LEVEL_ENV = "LINE_CLAMP_LOG_LEVEL"


def _default_log_dir() -> Path:
    local_appdata = os.getenv("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / "LineClamp" / "logs"
    return Path.home() / ".line_clamp" / "logs"


def _configured_level() -> int:
    level = logging.getLevelName(os.getenv(LEVEL_ENV, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _is_console(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def init_logging(
    app_name: str = "line_clamp", console_level: Optional[int] = None
) -> Path:
    """Initialize logging and return the log file path.

    The rotating file keeps the level from ``LINE_CLAMP_LOG_LEVEL``;
    ``console_level`` lets the command line keep stderr quieter than that.
    """
    log_path = _default_log_dir() / "app.log"
    level = _configured_level()
    root = logging.getLogger()
    root.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            file_handler = RotatingFileHandler(
                log_path, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
    except OSError:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    if not any(_is_console(h) for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)
    set_console_level(level if console_level is None else console_level)

    logging.getLogger(app_name).info("Logging initialized at %s", log_path)
    return log_path


def set_console_level(level: int) -> None:
    """Adjust console (stderr) handler level."""
    for handler in logging.getLogger().handlers:
        if _is_console(handler):
            handler.setLevel(level)
