from sqlmodel import create_engine, Session
from sqlalchemy import text
from typing import Generator
import logging
import os

from mmc_admin.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def _connect_args(url: str) -> dict:
    # Only the PostgreSQL driver understands connect_timeout
    if url.startswith("postgresql"):
        return {"connect_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS}
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Engine creation does not open a connection, so an unreachable database
# surfaces per request rather than at import time.
engine = create_engine(
    DATABASE_URL,
    echo=True if os.getenv("DEBUG") else False,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args=_connect_args(DATABASE_URL),
)


def check_connection(bind=None) -> bool:
    """Return True when a trivial query succeeds against the database."""
    try:
        with (bind or engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connectivity check failed: {e}")
        return False


def dispose_engine():
    engine.dispose()


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
