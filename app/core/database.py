import logging
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Process-wide engine, created on first use and disposed on shutdown
_engine: Optional[Engine] = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def _connect_args(url: str) -> dict:
    timeout = settings.DB_CONNECT_TIMEOUT_SECONDS
    if url.startswith("sqlite"):
        # Allow SQLite to work with FastAPI's threadpool; timeout bounds lock waits
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("postgresql"):
        return {"connect_timeout": timeout}
    return {}


def build_engine(url: str) -> Engine:
    engine = create_engine(
        url,
        connect_args=_connect_args(url),
        pool_pre_ping=True,
    )

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL;")
            cursor.execute("PRAGMA synchronous=NORMAL;")
            cursor.close()

    return engine


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = build_engine(settings.DATABASE_URL)
        SessionLocal.configure(bind=_engine)
        logger.info("Database engine created for %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine disposed")


def init_db() -> None:
    """Create tables that do not exist yet. Migrations remain the source of truth in production."""
    from app import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=get_engine())


def get_db():
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
