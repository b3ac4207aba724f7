"""Logging configuration module for environment-aware setup.

Configuration Logic:
- Development: Verbose coloured console logging
- Staging: Structured key=value console output, optional rotating file
- Production: JSON console output, noisy third-party loggers quietened
- Testing: Null handler, errors only
"""

import contextvars
import logging
import uuid
from typing import List

from ..config.settings import EnvironmentOption, Settings, get_settings
from .handlers import (
    create_console_handler,
    create_file_handler,
    create_null_handler,
)

correlation_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)


def setup_logging_configuration() -> None:
    """Set up logging configuration based on application settings.

    Clears the root logger's handlers and installs the handlers for the
    current environment. Called once, lazily, by the logger factory.
    """
    settings = get_settings()

    logging.getLogger().handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.STAGING:
        handlers = _staging_handlers(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        handlers = _production_handlers(settings)
    else:
        handlers = _development_handlers(settings)

    root_logger = logging.getLogger()
    for handler in handlers:
        if settings.LOG_CORRELATION_ID:
            handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(handler)
    root_logger.setLevel(settings.LOG_LEVEL_INT)

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_noisy_loggers()


def _file_handler(settings: Settings) -> logging.Handler:
    return create_file_handler(
        filepath=settings.LOG_FILE_PATH,
        format_type="structured",
        level=logging.DEBUG,
        max_bytes=settings.LOG_FILE_MAX_SIZE,
        backup_count=settings.LOG_FILE_BACKUP_COUNT,
    )


def _development_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type=settings.LOG_FORMAT, level=console_level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _staging_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(create_console_handler(format_type="structured", level=settings.LOG_LEVEL_INT, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _production_handlers(settings: Settings) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=console_level, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(_file_handler(settings))

    return handlers


def _configure_noisy_loggers() -> None:
    """Raise the level of chatty third-party loggers in production."""
    noisy_loggers = {
        "httpx": logging.WARNING,
        "httpcore": logging.WARNING,
        "asyncpg": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "sqlalchemy.dialects": logging.WARNING,
        "sqlalchemy.pool": logging.WARNING,
        "uvicorn.access": logging.WARNING,
    }

    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Configure minimal logging for test runs.

    Called from test fixtures to replace whatever the environment set up.
    pytest's own ``caplog`` handler still receives records.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "asyncpg", "httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


class CorrelationIdFilter(logging.Filter):
    """Stamp the current request's correlation id on every record.

    The id is read from ``correlation_id_var``, which the request middleware
    sets per request; records emitted outside a request get
    ``"no-correlation"``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id() or "no-correlation"
        return True


def set_correlation_id(correlation_id: str) -> contextvars.Token:
    """Set correlation ID in context for current request.

    Args:
        correlation_id: Unique identifier for request tracing

    Returns:
        Token that restores the previous value via ``reset_correlation_id``
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return correlation_id_var.get()


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())
