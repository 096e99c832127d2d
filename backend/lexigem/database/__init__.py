"""
Database configuration and initialization module.

This module sets up the database connection, session management, and base model
for LexiGem. It supports both SQLite (development) and PostgreSQL (production)
databases.

Author: LexiGem Team
Version: 1.0.0
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from lexigem.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False):
    """
    Create an engine for the given URL.

    SQLite needs a shared connection pool so the same database is visible
    from every request thread, including in-memory databases used by tests.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo
        )

    return create_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        echo=echo
    )


engine = build_engine(settings.database_url, echo=settings.database_echo)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.

    This function creates a new database session for each request
    and ensures it's properly closed after use.

    Yields:
        Session: SQLAlchemy database session

    Example:
        @app.get("/documents/")
        def list_documents(db: Session = Depends(get_db)):
            return db.query(Document).all()
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None):
    """
    Initialize the database by creating all tables.

    This function should be called when the application starts
    to ensure all database tables are created.
    """
    # Register models on Base.metadata before create_all
    from lexigem import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise


def check_db_connection(bind=None) -> bool:
    """
    Check if the database connection is working.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


__all__ = [
    "engine",
    "build_engine",
    "SessionLocal",
    "Base",
    "get_db",
    "init_db",
    "check_db_connection",
]
