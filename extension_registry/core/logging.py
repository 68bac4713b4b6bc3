# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Structured logging for the extension registry.

Provides JSON-formatted logging for easy parsing and analysis, with a
plain text formatter for local development.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Any
from pathlib import Path

_RESERVED_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName",
    "relativeCreated", "thread", "threadName", "exc_info",
    "exc_text", "stack_info", "taskName", "asctime"
])


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extra fields passed through log_event()
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Simple text formatter for human-readable logs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Get configured logger instance.

    Args:
        name: Logger name (usually __name__)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type (json or text)
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    level: str = "INFO",
    **fields: Any
) -> None:
    """
    Log a registry event with structured fields.

    Fields whose names collide with LogRecord attributes (``name``,
    ``created``, ``message``...) would make the logging module raise, so
    they are emitted as ``field_<name>`` instead.

    Args:
        logger: Logger instance
        event: Event name, e.g. "package_published"
        level: Log level
        **fields: Additional fields to include in log
    """
    extra = {
        (f"field_{key}" if key in _RESERVED_ATTRS else key): value
        for key, value in fields.items()
    }
    getattr(logger, level.lower())(event, extra=extra)


def get_service_logger(service_name: str) -> logging.Logger:
    """Get logger for service layer."""
    from extension_registry.core.config import get_config
    config = get_config()
    return get_logger(
        f"extension_registry.service.{service_name}",
        log_level=config.log_level,
        log_format=config.log_format
    )


def get_audit_logger(config: Optional[Any] = None) -> logging.Logger:
    """
    Get logger for the administrative audit trail.

    Audit logs go to a separate dated file under the logs directory
    when one is configured, otherwise to stdout only.
    """
    from extension_registry.core.config import get_config
    from datetime import date

    config = config or get_config()
    log_file = None
    if config.logs_path:
        log_file = Path(config.logs_path) / f"audit-{date.today().isoformat()}.log"
    return get_logger(
        "extension_registry.audit",
        log_level="INFO",
        log_format="json",
        log_file=log_file
    )
