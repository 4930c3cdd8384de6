"""Database session management."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session, sessionmaker

from cineverse.db.engine import engine

# Request-scoped sessions; services commit explicitly
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Returned rows stay readable after the service commits
)


def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        # close() also rolls back anything a failed request left uncommitted
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for maintenance scripts: commit on success, roll back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
