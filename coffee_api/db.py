from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .settings import settings


class Base(DeclarativeBase):
    pass


_engine = None
_SessionLocal = None


def init_engine(database_url: str | None = None):
    """Create the process-wide engine and session factory.

    Called by the app lifespan at startup; `dispose_engine` undoes it at
    shutdown. Outside the app, `get_engine`/`SessionLocal` create it lazily.
    """
    global _engine, _SessionLocal
    url = database_url or settings.sqlalchemy_url
    _engine = create_engine(url, pool_pre_ping=True)
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine():
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def dispose_engine() -> None:
    """Close pooled connections. Called once on shutdown."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def SessionLocal():
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


def get_db():
    """Request-scoped session. Tests swap this out via dependency_overrides."""
    db = SessionLocal()()
    try:
        yield db
    finally:
        db.close()
