import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .core.exception import PersistenceException

logger = logging.getLogger(__name__)

# Configure database engine with appropriate settings
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite doesn't support connection pooling arguments
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG
    )
else:
    # Configure connection pool for PostgreSQL/MySQL
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=3600,   # Recycle connections after 1 hour
        pool_size=10,
        max_overflow=20,
        echo=settings.DEBUG
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Database session dependency for FastAPI.
    Properly manages session lifecycle - creates, yields, and closes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session, action: str = "save changes") -> Iterator[Session]:
    """
    Run several writes as one transaction.

    Commits once when the block exits cleanly. Any SQLAlchemy error rolls the
    whole block back and surfaces as a PersistenceException; other exceptions
    (business rule failures raised inside the block) roll back and propagate
    unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as ex:
        db.rollback()
        logger.error("Transaction failed while trying to %s", action, exc_info=ex)
        raise PersistenceException(f"Failed to {action}.") from ex
    except Exception:
        db.rollback()
        raise
