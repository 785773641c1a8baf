"""
Database engine, session factory and declarative base.

Models are declared without a schema; the configured ``DB_SCHEMA`` is applied
at execution time through SQLAlchemy's ``schema_translate_map`` so the same
mappings work against PostgreSQL (``sis_cuipo``) and against SQLite in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str, schema: str | None = None, **kwargs: Any) -> Engine:
    """Create an engine that maps schema-less tables onto *schema*.

    Args:
        url: SQLAlchemy database URL.
        schema: Target schema name, or ``None`` to use the default one.
        **kwargs: Extra ``create_engine`` arguments (pool class, connect args).

    Returns:
        A configured ``Engine``.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)

    engine = create_engine(url, **kwargs)
    if schema:
        engine = engine.execution_options(schema_translate_map={None: schema})
    return engine


settings = get_settings()

engine = build_engine(settings.DATABASE_URL, settings.DB_SCHEMA)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
