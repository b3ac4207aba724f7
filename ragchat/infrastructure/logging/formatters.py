"""Logging formatters for the console and file handlers.

Available Formatters:
- SimpleFormatter: ``[LEVEL] module: message``
- DetailedFormatter: timestamped console output for development
- StructuredFormatter: ``key=value`` pairs, readable and grep-friendly
- JSONFormatter: one JSON object per line for log aggregation
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Type

_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the fields a caller attached to the record via ``extra``."""
    return {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}


class SimpleFormatter(logging.Formatter):
    """Basic console output.

    Example: [INFO] ragchat.modules.ingestion.services: Document 4 processed
    """

    def __init__(self):
        super().__init__(fmt="[%(levelname)s] %(name)s: %(message)s", datefmt="%H:%M:%S")


class DetailedFormatter(logging.Formatter):
    """Timestamped console output: ``YYYY-MM-DD HH:MM:SS [LEVEL] module: message``."""

    def __init__(self):
        super().__init__(fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


class StructuredFormatter(logging.Formatter):
    """Key-value formatter.

    Format: timestamp=... level=LEVEL module=name message="text" key1=value1 key2="value 2"
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"timestamp={datetime.fromtimestamp(record.created, timezone.utc).isoformat()}",
            f"level={record.levelname}",
            f"module={record.name}",
            f'message="{record.getMessage()}"',
        ]

        for key, value in extra_fields(record).items():
            if isinstance(value, bool) or isinstance(value, (int, float)):
                parts.append(f"{key}={value}")
            else:
                parts.append(f'{key}="{value}"')

        if record.exc_info:
            exc_text = self.formatException(record.exc_info).replace("\n", "\\n")
            parts.append(f'exception="{exc_text}"')

        return " ".join(parts)


class JSONFormatter(logging.Formatter):
    """JSON formatter for production log pipelines."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
            "filename": record.filename,
            "function": record.funcName,
            "line_number": record.lineno,
            "process_id": record.process,
        }

        for key, value in extra_fields(record).items():
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False)


def get_formatter(format_type: str) -> logging.Formatter:
    """Get the formatter for a format name.

    Args:
        format_type: One of "simple", "detailed", "structured", "json"

    Returns:
        Formatter instance

    Raises:
        ValueError: If format_type is not recognized
    """
    formatters: dict[str, Type[logging.Formatter]] = {
        "simple": SimpleFormatter,
        "detailed": DetailedFormatter,
        "structured": StructuredFormatter,
        "json": JSONFormatter,
    }

    formatter_class = formatters.get(format_type.lower())
    if formatter_class is None:
        raise ValueError(f"Unknown format type: {format_type}. Available: {', '.join(formatters.keys())}")

    return formatter_class()
