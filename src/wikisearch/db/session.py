"""
Database Session Management

Provides the async SQLAlchemy engine and session factory for PostgreSQL,
plus a dialect-aware INSERT constructor for conflict-handling writes.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)

from ..config import settings


def make_engine(url: Optional[str] = None) -> AsyncEngine:
    """
    Build an async engine for the given URL (defaults to settings).

    SQLite URLs are accepted for local runs and tests.
    """
    url = url or settings.database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False)

    return create_async_engine(
        url,
        echo=False,  # Set True for SQL debugging
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def dialect_name(session: AsyncSession) -> str:
    if session.bind is None:
        return "postgresql"
    return session.bind.dialect.name


def dialect_insert(session: AsyncSession, table):
    """
    Return an INSERT construct supporting ON CONFLICT for the session's dialect.
    """
    if dialect_name(session) == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)
