import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_engine: Engine = None

# Session factory, bound lazily to the engine in get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine (singleton pattern)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.sqlalchemy_url
        kwargs = {"echo": settings.debug}  # Log SQL queries in debug mode
        if not url.startswith("sqlite"):
            # pool_size=5: maintain 5 connections ready
            # max_overflow=10: allow 10 extra connections under load
            kwargs.update(pool_size=5, max_overflow=10, pool_pre_ping=True)
        _engine = create_engine(url, **kwargs)
        SessionLocal.configure(bind=_engine)
    return _engine


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT 1"))
    """
    get_engine()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db():
    """
    Dependency for FastAPI route injection.
    Services commit their own units of work; anything left open is rolled back.
    Usage:
        @app.get("/subscription")
        def get_subscription(db: Session = Depends(get_db)):
            ...
    """
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables for the ORM models (idempotent)."""
    from app.models import Base

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables ensured")


def test_postgres_connection() -> bool:
    """
    Test if the relational store is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("Database connection failed: %s", e)
        return False
