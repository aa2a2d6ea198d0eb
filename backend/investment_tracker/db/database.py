"""
Database Configuration and Session Management
Supports both PostgreSQL and SQLite
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from pathlib import Path
import logging

from investment_tracker.core.config import DATABASE_URL as CONFIGURED_DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

DATABASE_URL = CONFIGURED_DATABASE_URL

# If no DATABASE_URL is set, default to SQLite for development
if not DATABASE_URL:
    # Create data directory if it doesn't exist
    data_dir = Path(__file__).resolve().parent.parent.parent / "data"
    data_dir.mkdir(exist_ok=True)
    DATABASE_URL = f"sqlite:///{data_dir / 'investment_tracker.db'}"

# Create database engine
# For SQLite, we need to add check_same_thread=False
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=SQL_ECHO
    )
else:
    # PostgreSQL or other databases
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        echo=SQL_ECHO
    )

# Create SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency function to get database session.
    Use this in FastAPI route dependencies.

    Example:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Initialize database - create all tables.
    Safe to call on every startup; existing tables are left untouched.
    """
    # Register every model on Base.metadata before creating tables
    import investment_tracker.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully")
