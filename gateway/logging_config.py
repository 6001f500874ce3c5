"""
============================================================================
FILE: logging_config.py
LOCATION: gateway/logging_config.py
============================================================================

PURPOSE:
    Logging for the gateway, in JSON for log aggregators or in a compact
    console format for local runs.

ROLE IN PROJECT:
    Every gateway module logs through a child of the "gateway" logger:
    - quota: one record per decision (DEBUG when allowed, INFO when denied),
      WARNING for malformed `limits` objects, ERROR for store failures
    - user_store: WARNING when a Firestore transaction runs out of retries
    - auth / routes: rejected tokens, provider and profile-update failures

    Quota records carry the fields in QUOTA_FIELDS as `extra`. The JSON
    formatter emits them as top-level keys and the console formatter
    appends them as key=value pairs, so denials can be filtered by uid,
    action or plan.

KEY COMPONENTS:
    - QUOTA_FIELDS: Record attributes copied into quota log lines
    - StructuredFormatter: JSON formatter (LOG_JSON=true)
    - DevelopmentFormatter: Console formatter (default)
    - setup_logging(level, production, logger_name): Configure base logger
    - get_logger(name): Get a child logger with the given name

LOG FORMAT (Development):
    HH:MM:SS [LEVEL] quota: Quota mail denied for u1 [uid=u1 action=mail ...]

LOG FORMAT (Production/JSON):
    {"timestamp": "...", "level": "...", "logger": "gateway.quota",
     "message": "...", "uid": "u1", "action": "mail", "plan": "free", ...}

DEPENDENCIES:
    - External: logging (Python standard library)
    - Internal: None

USAGE:
    from gateway.logging_config import get_logger

    logger = get_logger("quota")
    logger.info("Quota mail denied", extra={"uid": uid, "action": "mail"})
============================================================================
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Dict, Optional


BASE_LOGGER_NAME = "gateway"

QUOTA_FIELDS = ("uid", "action", "plan", "used", "limit", "window")


def quota_fields(record: logging.LogRecord) -> Dict[str, object]:
    """Return the quota attributes present on a record, in a fixed order."""
    return {
        field: getattr(record, field)
        for field in QUOTA_FIELDS
        if hasattr(record, field)
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(quota_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """Console formatter; the logger name is shown without the base prefix."""

    FORMAT = "%(asctime)s [%(levelname)s] %(shortname)s: %(message)s"

    def __init__(self):
        super().__init__(self.FORMAT, datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        prefix = BASE_LOGGER_NAME + "."
        record.shortname = (
            record.name[len(prefix):] if record.name.startswith(prefix) else record.name
        )
        line = super().format(record)
        fields = quota_fields(record)
        if fields:
            pairs = " ".join(f"{key}={value}" for key, value in fields.items())
            line = f"{line} [{pairs}]"
        return line


def setup_logging(
    level: str = "INFO",
    production: bool = False,
    logger_name: str = BASE_LOGGER_NAME,
) -> logging.Logger:
    """
    Configure the gateway's base logger.

    Args:
        level: Log level name; unknown names fall back to INFO
        production: JSON output if True, console output otherwise
        logger_name: Name of the logger to configure

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if production else DevelopmentFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a child of the gateway logger."""
    base_logger = logging.getLogger(BASE_LOGGER_NAME)
    if name:
        return base_logger.getChild(name)
    return base_logger


logger = setup_logging(
    level=os.getenv("LOG_LEVEL", "INFO"),
    production=os.getenv("LOG_JSON", "false").lower() == "true",
)
