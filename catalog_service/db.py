# catalog_service/db.py

"""
Database configuration and session management for the Catalog Service.

The engine is created lazily on first use and cached for the lifetime of the
process. `shutdown_db()` disposes it so the process can exit cleanly.
"""
import logging
import threading

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from . import config

logger = logging.getLogger(__name__)

# Base class for the ORM models
Base = declarative_base()

_engine = None
_session_factory = None
_lock = threading.Lock()


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(url):
    kwargs = {"echo": config.DATABASE_ECHO}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # An in-memory database only exists on a single shared connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        # pool_pre_ping=True helps maintain healthy connections in a pool
        kwargs["pool_pre_ping"] = True

    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def get_engine():
    """Return the process-wide engine, creating it on first call."""
    global _engine, _session_factory
    if _engine is None:
        with _lock:
            if _engine is None:
                logger.info(f"Creating database engine for {_safe_url(config.DATABASE_URL)}")
                _engine = _build_engine(config.DATABASE_URL)
                # autocommit=False ensures transactions must be committed explicitly.
                _session_factory = sessionmaker(
                    autocommit=False, autoflush=False, expire_on_commit=False, bind=_engine
                )
    return _engine


def SessionLocal():
    """Open a new session bound to the shared engine."""
    get_engine()
    return _session_factory()


def get_db():
    """
    Dependency to provide a new database session for FastAPI endpoints.
    A session is created for each request and automatically closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables that do not exist yet."""
    # Registers the mapped classes on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def shutdown_db():
    """Dispose the cached engine. Safe to call when no engine was created."""
    global _engine, _session_factory
    with _lock:
        if _engine is not None:
            _engine.dispose()
            logger.info("Database engine disposed.")
        _engine = None
        _session_factory = None


def _safe_url(url):
    # Hide credentials when logging the connection target
    if "@" in url:
        scheme, rest = url.split("://", 1)
        return f"{scheme}://***@{rest.split('@', 1)[1]}"
    return url
