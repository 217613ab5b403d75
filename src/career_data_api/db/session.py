from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from career_data_api.db.base import Base
from career_data_api.settings import get_settings

logger = logging.getLogger(__name__)

# Process-scoped state: created on first use, released only by dispose_engine().
_lock = threading.Lock()
_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def make_engine(url: str | None = None) -> Engine:
    """Create a pooled SQLAlchemy engine with SQLite-safe settings."""
    settings = get_settings()
    url = url or settings.sql_db_url
    if url.startswith("sqlite"):
        parsed = make_url(url)
        db_path = parsed.database
        connect_args = {"check_same_thread": False}
        if not db_path or db_path == ":memory:":
            # Each pooled connection would open its own empty in-memory database.
            return create_engine(
                url, future=True, connect_args=connect_args, poolclass=StaticPool
            )
        path = Path(db_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return create_engine(url, future=True, connect_args=connect_args)
    return create_engine(
        url,
        future=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_s,
        pool_pre_ping=True,
    )


def get_engine() -> Engine:
    """Return the process engine, creating it on first use."""
    global _engine
    if _engine is None:
        with _lock:
            if _engine is None:
                _engine = make_engine()
                logger.info("Database engine created (%s)", _engine.url.render_as_string())
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        engine = get_engine()
        with _lock:
            if _session_factory is None:
                _session_factory = make_session_factory(engine)
    return _session_factory


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on error."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine | None = None) -> None:
    """Create DB tables if they do not exist."""
    from career_data_api.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())


def dispose_engine() -> None:
    """Close pooled connections; the next get_engine() call starts over."""
    global _engine, _session_factory
    with _lock:
        if _engine is not None:
            _engine.dispose()
            logger.info("Database engine disposed")
        _engine = None
        _session_factory = None
