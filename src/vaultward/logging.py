"""
VaultWard logging.

Every component logs under the ``vaultward`` hierarchy with the tool name,
correlation id and risk passed as ``extra`` fields, so one pending
operation can be followed from reflection through confirmation:

    logger.warning("Rejected obsidian_delete_file", extra={"tool_name": ..., "correlation_id": ...})

Lines are human-readable by default and JSON when ``VAULTWARD_LOG_JSON`` is
set (see ``vaultward.config``).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER = "vaultward"

# Extra record attributes promoted into the structured output
STRUCTURED_FIELDS = (
    "correlation_id",
    "tool_name",
    "risk",
    "phase",
    "event_type",
    "provider",
    "action",
    "duration_ms",
)


class VaultWardFormatter(logging.Formatter):
    """Renders a record as ``[ts] LEVEL logger: message | key=value ...`` or one JSON object."""

    def __init__(self, json_output: bool = False):
        super().__init__()
        self._json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        context = {
            key: getattr(record, key)
            for key in STRUCTURED_FIELDS
            if getattr(record, key, None) is not None
        }
        exception = self.formatException(record.exc_info) if record.exc_info else None

        if self._json_output:
            entry: dict[str, Any] = {
                "timestamp": timestamp,
                "level": record.levelname,
                "logger": record.name,
                "message": message,
                **context,
            }
            if exception:
                entry["exception"] = exception
            return json.dumps(entry, default=str)

        line = f"[{timestamp}] {record.levelname:8s} {record.name}: {message}"
        if context:
            line += " | " + " ".join(f"{key}={value}" for key, value in context.items())
        if exception:
            line += "\n" + exception
        return line


def configure_logging(level: str = "INFO", json_output: bool = False, stream: TextIO | None = None) -> None:
    """(Re)configure the ``vaultward`` logger with a single handler.

    Unknown level names fall back to INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(VaultWardFormatter(json_output=json_output))
    logger.addHandler(handler)
    logger.propagate = False


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


configure_logging()
