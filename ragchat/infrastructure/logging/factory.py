"""Logger factory with lazy, settings-driven configuration.

The first call to ``get_logger`` configures the root logger from application
settings; later calls just hand out named loggers that inherit that setup.
"""

import inspect
import logging
from threading import Lock
from typing import Optional, Union

from ..config.settings import get_settings
from .config import setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a properly configured logger.

    Args:
        name: Logger name. If None, detected from the calling module.
        **extra_context: Fields added to every record from this logger.

    Returns:
        Configured logger, wrapped in a ``LoggerAdapter`` when context is given.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Chat turn completed", extra={"chat_id": 3, "model": "gpt-5-nano"})

        gateway_logger = get_logger(__name__, provider="openai")
        gateway_logger.warning("Provider returned 429")
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = logging.getLogger(name)

    if extra_context:
        return ContextLoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if not _logging_configured:
            setup_logging_configuration()
            _logging_configured = True

            settings = get_settings()
            logging.getLogger(__name__).info(
                f"Logging configured for {settings.ENVIRONMENT.value} environment",
                extra={
                    "log_level": settings.LOG_LEVEL,
                    "log_format": settings.LOG_FORMAT,
                    "console_enabled": settings.LOG_CONSOLE_ENABLED,
                    "file_enabled": settings.LOG_FILE_ENABLED,
                },
            )


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    """Return the ``__name__`` of the module that called ``get_logger``."""
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"

    finally:
        del frame


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its fixed context with per-call ``extra``.

    The standard adapter replaces a call's ``extra`` with its own; this one
    merges them, with per-call values taking precedence.
    """

    def process(self, msg, kwargs):
        adapter_extra = self.extra if isinstance(self.extra, dict) else {}
        call_extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**adapter_extra, **call_extra}
        return msg, kwargs
