"""Database infrastructure: engine, session dependency and shared model mixins."""

from .models import TimestampMixin
from .session import Base, async_session, create_tables, local_session

__all__ = [
    "Base",
    "TimestampMixin",
    "async_session",
    "create_tables",
    "local_session",
]
