"""
Database configuration and connection management.

Builds SQLAlchemy engines and session factories for the durable
vehicle repository.
"""

import time

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = structlog.get_logger(__name__)


def get_connect_args(db_url: str) -> dict:
    """
    Get database-specific connection arguments.

    Args:
        db_url: Database connection URL

    Returns:
        Connection arguments dict
    """
    if "sqlite" in db_url:
        return {"check_same_thread": False}
    return {}


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url.startswith("sqlite") and (":memory:" in db_url or db_url == "sqlite://")


def create_db_engine(db_url: str, slow_query_threshold_ms: int = 100) -> Engine:
    """
    Create an engine with slow-query logging attached.

    In-memory SQLite gets a StaticPool so every session shares one database.

    Args:
        db_url: Database connection URL
        slow_query_threshold_ms: Queries slower than this are logged

    Returns:
        Configured SQLAlchemy engine
    """
    options = {"connect_args": get_connect_args(db_url), "pool_pre_ping": True}
    if _is_memory_sqlite(db_url):
        options["poolclass"] = StaticPool

    engine = create_engine(db_url, **options)

    @event.listens_for(engine, "before_cursor_execute")
    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.time())

    @event.listens_for(engine, "after_cursor_execute")
    def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        total_time_ms = (time.time() - conn.info["query_start_time"].pop()) * 1000
        if total_time_ms > slow_query_threshold_ms:
            logger.warning(
                "Slow query detected",
                query_time_ms=round(total_time_ms, 2),
                statement=statement[:200],
            )

    safe_url = db_url.split("@")[0] + "@..." if "@" in db_url else db_url
    logger.info("Database engine created", url=safe_url)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to an engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    Initialize database tables.

    Creates missing tables; existing tables are left untouched.
    """
    logger.info("Initializing database tables...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database initialized successfully")


