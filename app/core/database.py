"""
Database engine and sessions for the billing service.

The engine is built from DB_URL (read from the environment or a .env file).
Every request gets its own session through ``get_db``; services commit per
profile or per invoice, and the session is closed when the request ends.
The invoicing CLI opens ``SessionLocal()`` directly. Without DB_URL no engine
is created: API calls answer 500 and the CLI exits with an error.
"""
import logging
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError
from fastapi import HTTPException
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

logger = logging.getLogger(__name__)

# Create engine and session
db_url = os.getenv("DB_URL")

engine = None
SessionLocal = None
if db_url:
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, connect_args=connect_args)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create all tables defined in SQLAlchemy models (new tables only, existing ones are untouched)."""
    if engine is None:
        return
    from app.models import Base  # noqa: F401 registers every model
    Base.metadata.create_all(bind=engine, checkfirst=True)


def get_db():
    if SessionLocal is None:
        raise HTTPException(
            status_code=500,
            detail="Database is not configured. Missing DB_URL environment variable."
        )
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def handle_database_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {func.__name__}: {e}", exc_info=True)
            error_message = f"Database error: {str(e)}"
            raise HTTPException(status_code=500, detail=error_message)

    return wrapper
