from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import declarative_base, sessionmaker
from .config import settings
import os
import logging

logger = logging.getLogger(__name__)

_DRIVER_PREFIX = "postgresql+psycopg://"


def resolve_database_url() -> str:
    """
    Return the PostgreSQL DSN the listing store connects to.

    DATABASE_URL from the environment wins over settings.database_url.
    ``postgres://`` and ``postgresql://`` DSNs are rewritten to the psycopg
    driver.

    Raises:
        RuntimeError: If no URL is configured or it is not PostgreSQL
    """
    url = os.getenv("DATABASE_URL") or settings.database_url
    if not url:
        raise RuntimeError(f"DATABASE_URL is required (e.g. {_DRIVER_PREFIX}user:pass@host:5432/capy)")

    for legacy in ("postgres://", "postgresql://"):
        if url.startswith(legacy):
            url = _DRIVER_PREFIX + url[len(legacy):]
            break

    if not url.startswith(_DRIVER_PREFIX):
        raise RuntimeError(
            f"Unsupported DATABASE_URL '{_mask_dsn(url)}': the listing store runs on PostgreSQL only"
        )
    return url


def _mask_dsn(url: str) -> str:
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return url.split("@", 1)[-1]


DB_URL = resolve_database_url()
logger.info("DB init: %s", _mask_dsn(DB_URL))

# No connection is opened until the first query
engine = create_engine(
    DB_URL,
    pool_pre_ping=True,
    future=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=30,
    pool_recycle=1800,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session for FastAPI routes"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory=SessionLocal):
    """Session for commands and scripts, closed on exit"""
    db = factory()
    try:
        yield db
    finally:
        db.close()
