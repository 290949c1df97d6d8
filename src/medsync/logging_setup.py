# src/medsync/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "medsync.log"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Background components that only reach the console at WARNING or above.
_QUIET_PREFIXES = ("medsync.tasks.task_scheduler",)


class _ConsoleNoiseFilter(logging.Filter):
    """Console gets our own logs; the refresh thread and everyone else only when it matters."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith("medsync."):
            # py.warnings and third-party libraries
            return record.levelno >= logging.ERROR
        if record.name.startswith(_QUIET_PREFIXES):
            return record.levelno >= logging.WARNING
        return True


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(_ConsoleNoiseFilter())
    return handler


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/medsync",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Install the console and file handlers on the root logger.

    Replaces whatever handlers were there, so calling it twice does not
    duplicate output. The file under log_dir keeps the full DEBUG trail,
    including the refresh loop ticks hidden from the console.
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for old in list(root.handlers):
        root.removeHandler(old)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    root.addHandler(_console_handler(console_level, formatter))
    root.addHandler(_file_handler(log_path / LOG_FILE_NAME, file_level, formatter))

    logging.captureWarnings(True)
