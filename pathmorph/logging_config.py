"""Logging setup for pathmorph tools.

Two output styles share one root configuration:

- JSON lines (``StructuredFormatter``) for batch frame exports, where logs
  are collected and filtered by machine
- A compact human-readable line for interactive use

Every JSON line carries a ``category`` derived from the logger name, so
geometry, morphing, rendering, parsing and CLI messages can be told apart
without parsing the message text.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from typing import TextIO

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_PLAIN_FORMAT = "%(asctime)s %(levelname)5s [%(name)s] %(message)s"
_MAX_LOG_BYTES = 50 * 1024 * 1024

# Third-party loggers that are chatty at DEBUG
_QUIET_LOGGERS = ("PIL",)


class StructuredFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    # Longest matching prefix wins
    CATEGORY_MAP = {
        "pathmorph.types": "geometry",
        "pathmorph.splitter": "geometry",
        "pathmorph.corners": "morph",
        "pathmorph.matching": "morph",
        "pathmorph.interpolation": "morph",
        "pathmorph.rendering": "render",
        "pathmorph.palette": "render",
        "pathmorph.svg": "io",
        "pathmorph.cli": "cli",
        "pathmorph.config": "system",
        "PIL": "render",
    }

    def _get_category(self, logger_name: str) -> str:
        matches = [
            prefix
            for prefix in self.CATEGORY_MAP
            if logger_name == prefix or logger_name.startswith(prefix + ".")
        ]
        if not matches:
            return "system"
        return self.CATEGORY_MAP[max(matches, key=len)]

    @staticmethod
    def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
        extra: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = repr(value)
            extra[key] = value
        return extra

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "category": self._get_category(record.name),
            "logger": record.name,
            "message": record.getMessage(),
        }
        extra = self._extra_fields(record)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class ErrorFilter(logging.Filter):
    """Pass ERROR and above only."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def _rotating_handler(
    filename: str, formatter: logging.Formatter, backup_count: int
) -> RotatingFileHandler:
    Path(filename).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename, maxBytes=_MAX_LOG_BYTES, backupCount=backup_count, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    json_format: bool = True,
    log_level: int = logging.INFO,
    log_file: str | None = None,
    error_log_file: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Replace the root handlers with pathmorph's.

    Args:
        json_format: JSON lines when True, the plain format otherwise
        log_level: Minimum level on the root logger
        log_file: Also write everything to this rotating file
        error_log_file: Also write ERROR and above to this rotating file
        stream: Where to write (default: sys.stderr)
    """
    formatter: logging.Formatter
    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(_PLAIN_FORMAT, datefmt="%H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    handlers[0].setFormatter(formatter)
    if log_file:
        handlers.append(_rotating_handler(log_file, formatter, backup_count=5))
    if error_log_file:
        error_handler = _rotating_handler(error_log_file, formatter, backup_count=10)
        error_handler.addFilter(ErrorFilter())
        handlers.append(error_handler)

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def setup_dev_logging(log_level: int = logging.INFO) -> None:
    """Plain logging for interactive use; ``LOG_JSON=true`` switches to JSON."""
    use_json = os.getenv("LOG_JSON", "false").lower() == "true"
    configure_logging(json_format=use_json, log_level=log_level)
