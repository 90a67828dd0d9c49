"""Logging setup for stickerfit.

configure_logging() installs one formatter on the root logger, tags every
record with the current conversion's request id, and keeps the HTTP client
libraries quiet unless debug logging is on.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from stickerfit.logging.context import ConversionContextFilter
from stickerfit.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from stickerfit.config.models import LoggingConfig

# request_tag is "[req:1a2b3c4d] " inside a conversion, else empty
TEXT_FORMAT = "%(asctime)s - %(request_tag)s%(name)s - %(levelname)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# httpx logs every request at INFO; URL fetches would flood conversion logs
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")

_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _open_log_file(path: Path, config: LoggingConfig) -> RotatingFileHandler | None:
    """Open the rotating log file, or report why it cannot be used."""
    try:
        path = path.expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger from LoggingConfig.

    Logs go to the configured file (rotated) and/or stderr. When the file
    cannot be opened, stderr is used instead so conversions are never
    silenced.

    Args:
        config: Logging configuration.
    """
    level = _LEVEL_MAP.get(config.level.casefold(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = _build_formatter(config.format)
    context_filter = ConversionContextFilter()

    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _open_log_file(Path(config.file), config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
