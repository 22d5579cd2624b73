"""
Processed-Term Ledger

Durable record of which terms have already triggered an ingestion attempt.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, exists
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ProcessedTerm
from .session import dialect_insert

logger = logging.getLogger("wikisearch.ledger")


class ProcessedTermLedger:
    """
    Insert-only ledger of processed terms.

    Reads fail open: if the lookup errors, the term is reported as not yet
    processed. Page upserts are idempotent, so a redundant re-ingestion is
    harmless, while a false positive would drop the term silently.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def commit(self) -> None:
        await self._session.commit()

    async def is_processed(self, term: str) -> bool:
        try:
            result = await self._session.execute(
                select(exists().where(ProcessedTerm.search_term == term))
            )
            return bool(result.scalar())
        except SQLAlchemyError as exc:
            logger.warning("Error checking processed term %r: %s", term, exc)
            await self._session.rollback()
            return False

    async def mark_processed(self, term: str) -> None:
        """
        Record the term. Marking an already recorded term is a no-op.
        """
        stmt = (
            dialect_insert(self._session, ProcessedTerm)
            .values(search_term=term)
            .on_conflict_do_nothing(index_elements=[ProcessedTerm.search_term])
        )
        await self._session.execute(stmt)
