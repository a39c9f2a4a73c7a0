"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, vecta.configs
System role: Database schema initialization

Usage:
    python -m vecta.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from vecta.boundary.db.base import Base
from vecta.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from vecta.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: CREATE TABLE IF NOT EXISTS for each model, so safe to run
    multiple times. Existing tables remain unchanged.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


if __name__ == "__main__":
    asyncio.run(create_all_tables())
