# src/smart_todo/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "smart_todo.log"

# Loggers behind the weather fetcher; their warnings explain a failed refresh.
WEATHER_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def _is_under(name: str, parent: str) -> bool:
    return name == parent or name.startswith(parent + ".")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the REPL readable while tasks are being typed:
    - smart_todo records pass at the handler level
    - the weather transport passes from WARNING up
    - everything else (py.warnings included) only from ERROR up
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if _is_under(name, "smart_todo"):
            return True
        if any(_is_under(name, t) for t in WEATHER_TRANSPORT_LOGGERS):
            return record.levelno >= logging.WARNING
        return record.levelno >= logging.ERROR


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """'debug' -> logging.DEBUG; unknown names give `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/smart_todo",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler on stderr (filtered) plus a UTF-8 file handler with
    everything from `file_level` up. Returns the log file path.

    Call once, before the first record is emitted.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    for name in WEATHER_TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
