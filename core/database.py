# core/database.py
# Central SQLAlchemy setup: engine, SessionLocal, Base
# All models across the app must import THIS Base.

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from utils.config import get_settings

# DATABASE_URL comes from the environment; sqlite for local dev
DATABASE_URL = get_settings().database_url

# For SQLite + multithreaded FastAPI, set check_same_thread=False
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create the SQLAlchemy engine
engine = create_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=connect_args
)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
    expire_on_commit=False,
)

# Base class for all models
Base = declarative_base()


def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    # Messages rely on ON DELETE CASCADE, which SQLite only honours with this on
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


if DATABASE_URL.startswith("sqlite"):
    event.listen(engine, "connect", set_sqlite_pragma)


def init_db(bind=None):
    """Create tables in dev (migration tool recommended for prod)."""
    import models  # noqa: F401  ensure models import so SQLAlchemy registers
    Base.metadata.create_all(bind=bind or engine)


# Dependency for FastAPI routes; one session per request, always closed
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
