"""
Database Configuration for the trivia backend.

Contains database engine setup, session management, and initialization functions.
"""

import logging
from contextlib import contextmanager
from typing import Optional
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from config import settings
from utils.constants import SETTING_KEYS
from utils.helpers import generate_share_code
from .models import Base, GameSetting

# Configure logging
logger = logging.getLogger(__name__)

# Create session factory; bound to an engine by configure_database()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)
engine = None

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def configure_database(database_url: Optional[str] = None, echo: Optional[bool] = None):
    """
    Create the engine for a database URL and bind the session factory to it.

    Args:
        database_url: SQLAlchemy URL, defaults to settings.DATABASE_URL
        echo: Log SQL statements, defaults to settings.SQL_DEBUG

    Returns:
        The new engine
    """
    global engine

    database_url = database_url or settings.DATABASE_URL
    echo = settings.SQL_DEBUG if echo is None else echo

    if engine is not None:
        engine.dispose()

    if database_url.startswith('sqlite'):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool
        )
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
        logger.info("Using SQLite database")
    else:
        # PostgreSQL configuration
        engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=20,
            max_overflow=30,
            pool_timeout=30,
            pool_recycle=3600,  # Recycle connections after 1 hour
        )

    SessionLocal.configure(bind=engine)
    return engine

def get_engine():
    """Return the current engine, creating the default one on first use."""
    if engine is None:
        configure_database()
    return engine

@contextmanager
def get_db_session():
    """Context manager for database sessions with automatic cleanup."""
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()

def init_database(share_code: Optional[str] = None, admin_password: Optional[str] = None):
    """
    Initialize the database: create tables and seed the game settings.

    Existing settings are left alone so a restart never rotates the share code.
    """
    try:
        # Create all tables
        Base.metadata.create_all(bind=get_engine())
        logger.info("Database tables created successfully")

        defaults = {
            SETTING_KEYS['SHARE_CODE']: share_code or settings.SHARE_CODE or generate_share_code(),
            SETTING_KEYS['ADMIN_PASSWORD']: admin_password or settings.ADMIN_PASSWORD,
        }

        with get_db_session() as session:
            for key, value in defaults.items():
                existing = session.query(GameSetting).filter_by(setting_key=key).first()
                if not existing:
                    session.add(GameSetting(setting_key=key, setting_value=value))
                    logger.info(f"Seeded game setting '{key}'")

    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

def drop_database():
    """Drop every table. Used by tests and local resets."""
    Base.metadata.drop_all(bind=get_engine())
    logger.info("Dropped all database tables")
