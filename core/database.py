import os
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL


def make_engine(url: str = DATABASE_URL):
    """Create an engine; SQLite needs check_same_thread off under Streamlit."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        db_file = make_url(url).database
        if db_file and db_file != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_file)), exist_ok=True)
    eng = create_engine(url, connect_args=connect_args)

    if url.startswith("sqlite"):
        # SQLite ignores ON DELETE CASCADE unless asked per connection
        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return eng


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Create engine
engine = make_engine()

# Session factory
SessionLocal = make_session_factory(engine)

# Base class for all models
Base = declarative_base()


@contextmanager
def get_db_context(session_factory=None):
    """
    Context manager for database sessions.
    Automatically closes session when done.

    Usage:
        with get_db_context() as db:
            result = db.query(Model).all()
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()
