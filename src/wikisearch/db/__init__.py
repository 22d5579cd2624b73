"""
Database Package

Provides SQLAlchemy async engine/session management, model definitions,
the page store and the processed-term ledger.
"""

from .session import make_engine, make_session_factory
from .models import Base, Page, ProcessedTerm
from .page_store import PageStore
from .ledger import ProcessedTermLedger

__all__ = [
    "make_engine",
    "make_session_factory",
    "Base",
    "Page",
    "ProcessedTerm",
    "PageStore",
    "ProcessedTermLedger",
]
