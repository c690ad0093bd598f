"""
Database Initialization - Create, drop and seed tables.

On PostgreSQL the pgvector extension is enabled before the tables
that use vector columns are created.
"""
from sqlalchemy import text

from collabdocs.core.logging_config import get_logger
from collabdocs.database.connection import get_database
from collabdocs.database.models import Base
from collabdocs.database.seed import seed_defaults

logger = get_logger(__name__)


def init_tables() -> bool:
    """
    Create all tables if they don't exist.

    This is called once during application startup.

    Returns:
        True if tables were created successfully
    """
    db = get_database()

    try:
        if db.is_postgres:
            with db.engine.begin() as conn:
                conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))

        Base.metadata.create_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to initialize tables: {e}")
        raise

    logger.info("Tables initialized successfully")
    return True


def drop_tables() -> bool:
    """
    Drop all tables (use with caution!).

    Returns:
        True if tables were dropped successfully
    """
    db = get_database()

    try:
        Base.metadata.drop_all(db.engine)
    except Exception as e:
        logger.error(f"Failed to drop tables: {e}")
        raise

    logger.warning("All tables dropped")
    return True


def wipe_and_reinitialize() -> bool:
    """Drop everything, recreate the schema and reseed the defaults."""
    drop_tables()
    init_tables()
    seed_defaults()
    logger.warning("Database wiped and reinitialized")
    return True


if __name__ == "__main__":
    # Allow running directly to create tables
    print("Initializing tables...")
    init_tables()
    seed_defaults()
    print("Done!")
