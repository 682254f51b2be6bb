from __future__ import annotations

"""Database setup for the SKU allocator."""

from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

from config import DATABASE_URL, DB_PATH

if DATABASE_URL.startswith("sqlite:///"):
    if DATABASE_URL == f"sqlite:///{DB_PATH}":
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = scoped_session(sessionmaker(bind=engine, autocommit=False, autoflush=False))
Base = declarative_base()


def init_db() -> None:
    """Create database tables."""
    # Import models so they register on ``Base.metadata``.
    import utils.catalog  # noqa: F401
    import utils.settings  # noqa: F401
    import services.sequence_store  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_session():
    """Return a new database session."""
    return SessionLocal()
