"""Database session management."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from complaint_api.settings import get_settings

settings = get_settings()


def build_engine(database_url: str):
    """Create an engine with a bounded connection pool."""
    if database_url.startswith("sqlite"):
        # SQLite has no server-side pool to bound
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
    )


engine = build_engine(settings.database_url_computed)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
