"""Structured logging for asr-correct.

Provides configurable logging with:
- Verbosity levels mapped onto the standard logging levels
- Text or JSON-lines output carrying structured ``extra`` context
- Rich console rendering when attached to a terminal
- Optional file handler that always records everything
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

ROOT_LOGGER_NAME = "asr_correct"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class LogLevel(IntEnum):
    """Log verbosity levels."""

    QUIET = 0  # Only errors
    NORMAL = 1  # Errors + warnings
    VERBOSE = 2  # + info
    DEBUG = 3  # Everything


_LEVEL_MAP = {
    LogLevel.QUIET: logging.ERROR,
    LogLevel.NORMAL: logging.WARNING,
    LogLevel.VERBOSE: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


@dataclass
class LogConfig:
    """Configuration for logging.

    Attributes:
        level: Verbosity level
        log_file: Optional path to log file
        json_format: Emit one JSON object per record
        include_context: Append structured context to text records
        rich_console: Render console records with rich when on a terminal
    """

    level: LogLevel = LogLevel.NORMAL
    log_file: Path | None = None
    json_format: bool = False
    include_context: bool = True
    rich_console: bool = True


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Extract the structured context attached to a record via ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class StructuredFormatter(logging.Formatter):
    """Formatter that renders records with their structured context."""

    def __init__(self, json_format: bool = False, include_context: bool = True):
        super().__init__()
        self.json_format = json_format
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._format_json(record)
        return self._format_text(record)

    def _format_json(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context and self.include_context:
            data["context"] = {
                key: value if _is_json_value(value) else str(value)
                for key, value in context.items()
            }

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data)

    def _format_text(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        result = f"{timestamp} | {record.levelname[:5]:<5} | {record.name} | {record.getMessage()}"

        if self.include_context:
            context = record_context(record)
            if context:
                result += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


class ContextRichHandler(RichHandler):
    """RichHandler that appends structured context to the message."""

    def render_message(self, record: logging.LogRecord, message: str):
        context = record_context(record)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            message = f"{message} [dim]{escape(pairs)}[/dim]"
        return super().render_message(record, message)


def _is_json_value(value: Any) -> bool:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


_config: LogConfig = LogConfig()
_initialized: bool = False


def configure_logging(config: LogConfig | None = None) -> None:
    """Configure the ``asr_correct`` logger hierarchy.

    Args:
        config: Logging configuration; the current one is reused when omitted
    """
    global _config, _initialized

    if config:
        _config = config

    log_level = _LEVEL_MAP[_config.level]

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if _config.log_file else log_level)
    root_logger.handlers.clear()

    console_handler: logging.Handler
    if _config.rich_console and not _config.json_format and sys.stderr.isatty():
        console_handler = ContextRichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=True,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            StructuredFormatter(
                json_format=_config.json_format,
                include_context=_config.include_context,
            )
        )
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if _config.log_file:
        _config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(_config.log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            StructuredFormatter(json_format=_config.json_format, include_context=True)
        )
        root_logger.addHandler(file_handler)

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger under the configured ``asr_correct`` hierarchy
    """
    if not _initialized:
        configure_logging()

    return logging.getLogger(name)


def set_verbosity(level: LogLevel) -> None:
    """Set global verbosity level.

    Args:
        level: Verbosity level
    """
    _config.level = level
    configure_logging(_config)


def enable_file_logging(log_file: Path) -> None:
    """Enable logging to a file.

    Args:
        log_file: Path to log file
    """
    _config.log_file = log_file
    configure_logging(_config)
