"""Centralized logging infrastructure for ragchat.

Every module obtains its logger through ``get_logger`` instead of calling
``logging.getLogger`` directly, so the root logger is configured exactly once
per process from application settings.

Usage:
    ```python
    from ragchat.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Document ingested", extra={"document_id": 42, "chunk_count": 7})
    ```
"""

from .config import (
    configure_testing_logging,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "configure_testing_logging",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
    "set_correlation_id",
    "setup_logging_configuration",
]
