"""
Database session module.
Provides the engine, session factory and declarative base.
"""
import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from nalanda.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a database session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all tables registered on the declarative base."""
    # Import models so SQLAlchemy registers metadata before create_all().
    import nalanda.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def commit_or_rollback(db: Session, action: str) -> None:
    """Commit ``db``, rolling back and logging before re-raising on failure."""
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error while trying to {action}: {str(e)}")
        raise
