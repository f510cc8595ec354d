"""
Database engine, session factory and declarative base
"""
import logging
from typing import Any, Dict

from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from quizhub.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Build engine keyword arguments so every storage call is time bounded

    SQLite has no pool or statement timeouts, only a busy timeout.
    """
    backend = make_url(database_url).get_backend_name()

    if backend == "sqlite":
        return {"connect_args": {"check_same_thread": False, "timeout": settings.DB_CONNECT_TIMEOUT}}

    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
    }
    if backend == "postgresql":
        options["connect_args"] = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    return options


engine = create_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    """FastAPI dependency yielding one database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables"""
    # Register models on Base.metadata
    import quizhub.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
