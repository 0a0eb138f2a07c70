from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

LOGGER_NAME = "rest_tester"
DEFAULT_LOG_FILE = "rest-tester.log"
CONSOLE_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


@dataclass(frozen=True)
class LoggingConfig:
    level: int = logging.INFO
    log_dir: str | None = None
    log_rotation: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5


class DetailedTextFormatter(logging.Formatter):
    """File log formatter: one header line per record plus its ``extra`` fields."""

    max_value_length = 200

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        component = record.name.rsplit(".", 1)[-1]
        lines = [f"{timestamp} | {record.levelname:7s} | {component:14s} | {record.getMessage()}"]

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            lines.append(f"  {key}: {self._render(value)}")

        if record.exc_info:
            lines.append("  traceback:")
            lines.extend("    " + line for line in "".join(traceback.format_exception(*record.exc_info)).splitlines())

        lines.append("")
        return "\n".join(lines)

    def _render(self, value: Any) -> str:
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, indent=2, default=str)
        text = str(value)
        if len(text) > self.max_value_length:
            return text[: self.max_value_length] + "..."
        return text


def get_logger(name: str | None = None) -> logging.Logger:
    logger = logging.getLogger(name or LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())
    return logger


def configure_logging(config: LoggingConfig | None = None) -> None:
    """Route package logs to stderr, and optionally to a file.

    stdout carries the MCP stdio channel, so nothing may be logged there.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(config.level)
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(config.level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if config.log_dir is None:
        return

    log_file = Path(config.log_dir) / DEFAULT_LOG_FILE
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        if config.log_rotation:
            from logging.handlers import RotatingFileHandler

            file_handler: logging.Handler = RotatingFileHandler(
                log_file,
                mode="a",
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
            )
        else:
            file_handler = logging.FileHandler(log_file, mode="a")
    except OSError as e:
        logger.warning(f"Could not create log file {log_file}: {e}; logging to stderr only")
        return

    file_handler.setLevel(config.level)
    file_handler.setFormatter(DetailedTextFormatter())
    logger.addHandler(file_handler)
