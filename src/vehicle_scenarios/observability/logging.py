"""Structured JSON logging for the command line entry point."""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "vehicle-scenarios"


class ScenarioJsonFormatter(JsonFormatter):
    """JSON formatter adding timestamp, level and service fields."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "WARNING") -> None:
    """
    Route all records to stderr as JSON lines.

    stdout is reserved for command output.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ScenarioJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)
