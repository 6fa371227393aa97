"""
Engine and session wiring for the student record store.

DATABASE_URL picks the backend: PostgreSQL in deployment (schema managed by
Alembic), SQLite on a developer machine (tables created at startup).
Routes receive a session through the get_db dependency.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from dropout_tracker.config import DATABASE_URL


def _engine_options(url: str) -> dict:
    """create_engine keyword arguments for the given database URL."""
    options = {"echo": False}
    if url.startswith("postgresql"):
        # Report exports read the whole table, so keep a few spare connections
        options.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
    elif url.startswith("sqlite"):
        # Sessions cross threads under FastAPI's threadpool
        options["connect_args"] = {"check_same_thread": False}
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

if DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def enable_sqlite_wal(dbapi_connection, connection_record):
        # Lets report downloads read while a student record is being written
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for the students table."""


def get_db():
    """Yield one session per request and close it when the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create the students table on SQLite. PostgreSQL schemas come from Alembic."""
    Base.metadata.create_all(bind=engine)
