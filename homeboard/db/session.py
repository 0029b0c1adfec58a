"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database connection and session dependency for FastAPI.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from homeboard.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# pool_pre_ping=True: check a pooled connection with "SELECT 1" before use,
# so a database restart does not surface as a failed credential read.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# autocommit=False: the credential store decides when to commit
# autoflush=False: predictable flush points
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides a database session.

    One session per request; close() always runs, even if the route raises.

    Usage in a route:
        @router.get("/events")
        async def list_events(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
