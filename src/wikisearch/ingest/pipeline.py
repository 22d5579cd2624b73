"""
Ingestion Pipeline

One sequential pass over the search log:

    extract terms -> ledger check -> resolve -> upsert page -> ledger mark

Failures are per term. A term that cannot be resolved or stored is logged,
counted and left unmarked so a later run retries it; the pass never aborts
because of a single term, including on errors nobody anticipated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .resolver import PageResolver
from .terms import extract_search_terms
from ..core.errors import NoPageFoundError, InvalidPageError
from ..db import PageStore, ProcessedTermLedger

logger = logging.getLogger("wikisearch.ingest")


@dataclass
class IngestionReport:
    """Counters for one ingestion run."""
    extracted: int = 0
    skipped: int = 0
    stored: int = 0
    failed: int = 0


async def already_processed(
    session_factory: async_sessionmaker[AsyncSession],
    term: str,
) -> bool:
    async with session_factory() as session:
        return await ProcessedTermLedger(session).is_processed(term)


async def ingest_term(
    session_factory: async_sessionmaker[AsyncSession],
    resolver: PageResolver,
    term: str,
    languages: Sequence[str],
) -> bool:
    """
    Resolve, store and mark a single term. Returns True when a page was stored.
    """
    try:
        page, language = await resolver.resolve(term, languages)
    except NoPageFoundError as exc:
        logger.warning("Failed to scrape any language for term %r: %s", term, exc)
        return False

    async with session_factory() as session:
        try:
            await PageStore(session).upsert_page(page)
            await session.commit()
        except InvalidPageError as exc:
            logger.warning("Skipping %r: %s", term, exc)
            return False
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.error("Error saving page %s to DB: %s", page.url, exc)
            return False

        ledger = ProcessedTermLedger(session)
        try:
            await ledger.mark_processed(term)
            await ledger.commit()
        except SQLAlchemyError as exc:
            # Page is stored; a later run will re-fetch and upsert it again
            await session.rollback()
            logger.error("Error marking term %r as processed: %s", term, exc)

    logger.info("Stored %r from %s", term, language)
    return True


async def run_ingestion(
    log_path: Union[str, Path],
    session_factory: async_sessionmaker[AsyncSession],
    resolver: PageResolver,
    languages: Sequence[str],
) -> IngestionReport:
    report = IngestionReport()

    terms = extract_search_terms(log_path)
    report.extracted = len(terms)
    if not terms:
        logger.info("No search terms found.")
        return report

    for term in sorted(terms):
        try:
            if await already_processed(session_factory, term):
                logger.info("Skipping already processed term: %s", term)
                report.skipped += 1
                continue

            stored = await ingest_term(session_factory, resolver, term, languages)
        except Exception:
            # One term must never end the pass
            logger.exception("Unexpected error ingesting term %r", term)
            report.failed += 1
            continue

        if stored:
            report.stored += 1
        else:
            report.failed += 1

    logger.info(
        "Ingestion finished: %d extracted, %d skipped, %d stored, %d failed",
        report.extracted,
        report.skipped,
        report.stored,
        report.failed,
    )
    return report
