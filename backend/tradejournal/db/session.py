"""
Database engine and session registry.

Request handlers get a session per request through ``api.dependencies.get_db``;
repositories flush and the routers commit.
"""

import time
from typing import Dict, Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker, scoped_session
from loguru import logger

from tradejournal.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Pool and driver options per backend."""
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.debug,
        }

    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "echo": settings.debug,
        "connect_args": {
            "connect_timeout": 10,
            "options": "-c statement_timeout=60000",  # 60 second query timeout
        },
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = scoped_session(
    sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,  # Prevent lazy load issues after commit
    )
)


def init_db() -> None:
    """Initialize database schema (create all tables).

    Idempotent: only creates tables/indexes that don't exist. This is the
    only place schema is changed; nothing client-reachable executes DDL.
    """
    from tradejournal.db.models import Base

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database schema initialized successfully")


def get_db() -> Session:
    """
    Get a database session.

    Note:
        Caller is responsible for closing the session with close_db_session().
    """
    return SessionLocal()


def close_db_session(db: Session) -> None:
    """Close a session from get_db() and remove it from the registry."""
    from sqlalchemy.exc import IllegalStateChangeError

    try:
        db.close()
    except IllegalStateChangeError:
        # Session already closed
        pass

    SessionLocal.remove()


def check_db_health() -> Dict[str, Any]:
    """Run a trivial query and report latency."""
    t0 = time.time()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {
            "healthy": True,
            "latency_ms": int((time.time() - t0) * 1000),
            "backend": engine.dialect.name,
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "healthy": False,
            "error": str(e),
            "backend": engine.dialect.name,
        }
