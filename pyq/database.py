"""Database utilities and setup."""
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from pyq.config import DATABASE_URL, DB_DIR


def make_engine(url: str):
    """Create an engine; SQLite connections are shared with the timer thread."""
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )


# Create engine
engine = make_engine(DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base class for models
class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Initialize database (create all tables)."""
    # Register models on Base.metadata
    import pyq.models.db  # noqa: F401

    if bind is None:
        if DATABASE_URL.startswith("sqlite:///"):
            DB_DIR.mkdir(parents=True, exist_ok=True)
        bind = engine
    Base.metadata.create_all(bind=bind)
