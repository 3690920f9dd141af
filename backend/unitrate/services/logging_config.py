"""Structured logging configuration for the Unit-Rate Estimator engine."""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional

from unitrate import config


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "entity_code"):
            log_entry["entity_code"] = record.entity_code
        if hasattr(record, "function_name"):
            log_entry["timed_function"] = record.function_name
        if hasattr(record, "duration_ms"):
            log_entry["duration_ms"] = record.duration_ms
        return json.dumps(log_entry)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None):
    """
    Configure application logging.

    The engine never calls this itself; the embedding application does, once.
    Defaults come from config.LOG_LEVEL / config.LOG_FORMAT.
    """
    if level is None:
        level = config.LOG_LEVEL
    if json_output is None:
        json_output = config.LOG_FORMAT != "text"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]
