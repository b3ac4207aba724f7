"""Script to create database tables from SQLAlchemy models."""

import asyncio
import sys

from sqlalchemy.exc import SQLAlchemyError

from ragchat.infrastructure.database.session import create_tables
from ragchat.infrastructure.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def main() -> None:
    """Create database tables."""
    configure_logging()
    logger.info("Creating database tables...")

    try:
        await create_tables()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error creating database tables: {e}", exc_info=True)
        sys.exit(1)

    logger.info("Database tables created successfully")


if __name__ == "__main__":
    asyncio.run(main())
