from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so every
    model gets a generated ``__init__``/``__repr__`` from its mapped columns.
    Columns declared with ``init=False`` (identifiers, timestamps) are filled
    by the database or by default factories instead of the constructor.

    Example:
        ```python
        class ChatSession(Base, TimestampMixin):
            __tablename__ = "chat_sessions"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
            owner_id: Mapped[str] = mapped_column(String(255), index=True)

        session = ChatSession(owner_id="user-1")
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management.

    Yields:
        AsyncSession: A configured async database session.

    Note:
        Used as a FastAPI dependency via ``Depends(async_session)``. Tests
        override it through ``app.dependency_overrides`` to point at their
        own engine.
    """
    async_get_db = local_session
    async with async_get_db() as db:
        yield db


async def create_tables() -> None:
    """Create all tables in the database if they don't exist.

    Idempotent: existing tables are left unchanged. Model modules must be
    imported before calling so their tables are registered on the metadata.
    """
    from ...modules import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
