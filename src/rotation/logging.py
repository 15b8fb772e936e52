"""Logging setup for the tracker.

ROTATION_LOG_FORMAT picks "text" (default, readable on a terminal) or "json"
(one object per line, for when the CLI runs from cron or another script).
Structured fields ride along as ``rotation_*`` extras on the log record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TextIO

EXTRA_PREFIX = "rotation_"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, rotation_* extras included."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key.startswith(EXTRA_PREFIX)
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, sort_keys=True)


def build_handler(log_format: str, stream: TextIO | None = None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stderr)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    return handler


def setup_logging(log_format: str, level: int | str = logging.WARNING) -> None:
    """Route all logging to a single stderr handler in the chosen format."""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = build_handler(log_format)
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)
