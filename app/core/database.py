# app/core/database.py

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from contextlib import contextmanager

from app.core.config import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------
# DATABASE URL & ENGINE SETUP
# ---------------------------------------------------

DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # SQLite is used for local development and the test suite
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )

# ---------------------------------------------------
# SESSION FACTORY & BASE CLASS
# ---------------------------------------------------

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()

# ---------------------------------------------------
# CONTEXT MANAGER FOR SESSIONS
# ---------------------------------------------------

@contextmanager
def get_db_session():
    """
    Context-manager for SQLAlchemy sessions.
    Use like:
        with get_db_session() as db:
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# ---------------------------------------------------
# FASTAPI DEPENDENCY
# ---------------------------------------------------

def get_db():
    """
    FastAPI dependency to yield a SQLAlchemy session.
    Use in your route functions as:
        def some_route(..., db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
