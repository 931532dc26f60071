"""
SQLAlchemy engine, sessions and schema management.

Requests get a session from the `get_db` dependency; scheduled jobs, which
run outside any request, open one with `get_db_context`.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from app.core.config import get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

_engine = None
_SessionLocal = None


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    path = url.split("///", 1)[-1]
    if not path or path == ":memory:":
        return
    directory = Path(path).parent
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Created database directory", extra={"extra_data": {"directory": str(directory)}})


def _enforce_sqlite_foreign_keys(engine: Engine) -> None:
    # Off by default in SQLite; memberships, messages and reacts cascade through FKs
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine() -> Engine:
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.database_url

        connect_args = {}
        if _is_sqlite(url):
            # Scheduled jobs use the engine from the scheduler's worker thread
            connect_args["check_same_thread"] = False
            _ensure_sqlite_directory(url)

        _engine = create_engine(url, connect_args=connect_args, echo=settings.debug, pool_pre_ping=True)
        if _is_sqlite(url):
            _enforce_sqlite_foreign_keys(_engine)

        logger.info("Database engine created", extra={"extra_data": {"database_url": url}})
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory.

    Services flush explicitly before querying and read attributes after
    commit, hence no autoflush and no expiry on commit.
    """
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=get_engine(),
        )
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Session for work outside a request; rolled back if the block raises."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        logger.exception("Background database work failed")
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables."""
    from app.models import user, conversation, message, notification  # noqa: F401 - registers the mappers

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created")


def drop_db() -> None:
    """Drop every table; used to reset state between test runs."""
    Base.metadata.drop_all(bind=get_engine())
    logger.info("Database tables dropped")


def check_db_connection() -> bool:
    """Check if database is reachable."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection check failed", extra={"extra_data": {"error": str(e)}})
        return False
