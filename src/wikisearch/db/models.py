"""
SQLAlchemy Models

Defines the database schema for:
- Pages fetched from the content source (keyed by URL)
- The processed-term ledger
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Integer,
    String,
    Text,
    DateTime,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Page Model
# ---------------------------------------------------------------------

class Page(Base):
    """
    A stored article.

    The URL is the primary key: re-ingesting the same article overwrites
    the row in place rather than adding a new one.
    """
    __tablename__ = "pages"

    url: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(String(16), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )


# ---------------------------------------------------------------------
# Processed Term Model
# ---------------------------------------------------------------------

class ProcessedTerm(Base):
    """
    Ledger entry: presence means ingestion was attempted for the term.
    """
    __tablename__ = "processed_searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    search_term: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("search_term", name="uq_processed_search_term"),
    )
