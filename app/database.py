"""
Database Connection and Session Management
Async raw-SQL access through `databases`, SQLAlchemy metadata for migrations
"""

import logging

from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from app.config import settings
from app.utils.datetime_ist import utc_now

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

# For Supabase connection pooler (pgbouncer), disable prepared statements
if "supabase.com" in DATABASE_URL or "pooler.supabase.com" in DATABASE_URL:
    db_options = {"min_size": 1, "max_size": 5, "statement_cache_size": 0}
elif DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Create SQLAlchemy engine for migrations and scripts
engine = create_engine(
    DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://")
    if "postgresql://" in DATABASE_URL else DATABASE_URL
)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


async def connect_db():
    """Connect to database on startup"""
    await database.connect()
    logger.info("[OK] Database connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("[OK] Database disconnected")


async def update_row(table: str, row_id, values: dict, touch: bool = True) -> None:
    """
    UPDATE <table> SET <values> WHERE id = :id

    `table` and the keys of `values` come from code, never from request input.
    """
    if not values and not touch:
        return
    assignments = [f"{column} = :{column}" for column in values]
    params = dict(values)
    if touch:
        assignments.append("updated_at = :updated_at")
        params["updated_at"] = utc_now()
    params["id"] = str(row_id)
    await database.execute(
        f"UPDATE {table} SET {', '.join(assignments)} WHERE id = :id",
        params
    )
