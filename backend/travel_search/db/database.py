"""
Database connection and session management.
Pooled engine with bounded connect/statement timeouts so that no
search ever waits on the store indefinitely.
Supports PostgreSQL and SQLite backends.
"""

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from typing import Generator
import logging
import os
import time

from travel_search.core.config import settings
from travel_search.db.models import Base

logger = logging.getLogger(__name__)

# Track database availability to avoid repeated slow connection attempts
_db_available = True
_db_last_check = 0.0
_DB_RETRY_INTERVAL = 30  # Re-check every 30 seconds when DB is down


def _resolve_sqlite_url(url: str) -> str:
    """Relative SQLite paths are resolved against the backend directory."""
    db_path = url.replace("sqlite:///", "")
    if db_path.startswith("./"):
        backend_dir = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
        return f"sqlite:///{os.path.join(backend_dir, db_path[2:])}"
    return url


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def create_store_engine(url: str) -> Engine:
    """
    Build the engine for a database URL.
    File-backed SQLite and PostgreSQL hand each session its own pooled
    connection, so search sessions and search-log sessions never share a
    transaction. Only in-memory SQLite is pinned to one connection.
    """
    if url.startswith("sqlite"):
        options = {}
        if _is_memory_sqlite(url):
            options["poolclass"] = StaticPool
        store = create_engine(
            _resolve_sqlite_url(url),
            connect_args={
                "check_same_thread": False,
                "timeout": settings.database_connect_timeout,
            },
            echo=False,
            **options,
        )

        @event.listens_for(store, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return store

    store = create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=settings.database_pool_pre_ping,
        pool_timeout=settings.database_pool_timeout,
        echo=False,
        connect_args={
            "connect_timeout": settings.database_connect_timeout,
            "options": f"-c statement_timeout={settings.database_statement_timeout_ms}",
        },
    )

    @event.listens_for(store, "connect")
    def receive_connect(dbapi_conn, connection_record):
        """Tag connections so search traffic is identifiable in pg_stat_activity."""
        try:
            cursor = dbapi_conn.cursor()
            cursor.execute("SET application_name = 'travel-search'")
            cursor.close()
        except Exception as e:
            logger.debug(f"Could not set application_name: {e}")

    return store


engine = create_store_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db() -> Generator[Session | None, None, None]:
    """
    Dependency injection for database session.
    Yields None if the database is unavailable; callers treat that as a
    store failure. Unavailability is cached for _DB_RETRY_INTERVAL seconds.
    """
    global _db_available, _db_last_check

    if not _db_available:
        now = time.time()
        if now - _db_last_check < _DB_RETRY_INTERVAL:
            yield None
            return
        _db_last_check = now

    db = None
    try:
        db = SessionLocal()
        _db_available = True
    except Exception as e:
        logger.warning(f"Database unavailable: {e}")
        _db_available = False
        _db_last_check = time.time()
    try:
        yield db
    finally:
        if db is not None:
            db.close()


def mark_unavailable() -> None:
    """Short-circuit get_db() to None until the next retry window."""
    global _db_available, _db_last_check
    _db_available = False
    _db_last_check = time.time()


def init_db() -> None:
    """Initialize database tables at startup."""
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialized")
