# launchpal/shared/logging.py

import logging
import json
import sys
from datetime import datetime, timezone
from launchpal.shared.config import settings

_EXTRA_KEYS = ("request_id", "endpoint", "method", "user_id", "platform", "duration_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """Produces structured JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)
        return json.dumps(log_entry, default=str)


def get_logger(name: str, stream=None) -> logging.Logger:
    """Return a named logger with structured JSON handler.

    The MCP server passes ``sys.stderr`` since stdout carries the protocol.
    """
    logger = logging.getLogger(f"launchpal.{name}")
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    return logger
