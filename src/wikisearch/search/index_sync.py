"""
Index Synchronizer

Pushes the page store into the search engine's index.

The default strategy is a full rebuild: the index is deleted, recreated
with a fixed schema and bulk-loaded from the store. Readers may see a
missing or partially populated index while a rebuild runs.

Failure Model
-------------
- Existence check, delete and create are structural: any failure raises
  IndexSyncError and the sync stops before loading documents.
- Failing to read pages from the store also raises IndexSyncError.
- Per-document failures are logged and counted; the run continues, and a
  later sync repairs the gap.
"""

from __future__ import annotations

import abc
import enum
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Protocol

from elasticsearch import AsyncElasticsearch
from elasticsearch.exceptions import ApiError, TransportError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .engine import PAGE_INDEX_MAPPINGS
from ..config import settings
from ..core.errors import IndexSyncError
from ..db import Page, PageStore

logger = logging.getLogger("wikisearch.sync")


class IndexState(enum.Enum):
    ABSENT = "IndexAbsent"
    PRESENT = "IndexPresent"


@dataclass
class SyncReport:
    indexed: int = 0
    failed: int = 0
    final_state: IndexState = IndexState.ABSENT


class PageSource(Protocol):
    def iter_pages(self) -> AsyncIterator[Page]: ...


def page_to_document(page: Page) -> Dict[str, Any]:
    """Denormalized search document for a stored page."""
    return {
        "title": page.title,
        "url": page.url,
        "content": page.content,
        "language": page.language,
        "last_updated": page.last_updated.isoformat() if page.last_updated else None,
    }


# ---------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------

class SyncStrategy(abc.ABC):
    """
    How the index is brought in line with the store.

    An incremental strategy can replace FullRebuildStrategy without touching
    the page store or the query dispatcher.
    """

    @abc.abstractmethod
    async def sync(
        self,
        client: AsyncElasticsearch,
        index: str,
        source: PageSource,
    ) -> SyncReport:
        ...


class FullRebuildStrategy(SyncStrategy):
    """Delete-and-recreate, then load every page."""

    async def index_state(self, client: AsyncElasticsearch, index: str) -> IndexState:
        try:
            exists = await client.indices.exists(index=index)
        except (ApiError, TransportError) as exc:
            raise IndexSyncError(f"error checking if index {index!r} exists: {exc}") from exc
        return IndexState.PRESENT if exists else IndexState.ABSENT

    async def delete_index(self, client: AsyncElasticsearch, index: str) -> IndexState:
        logger.info("Index %r already exists - removing and rebuilding", index)
        try:
            await client.indices.delete(index=index)
        except (ApiError, TransportError) as exc:
            raise IndexSyncError(f"error deleting index {index!r}: {exc}") from exc
        return IndexState.ABSENT

    async def create_index(self, client: AsyncElasticsearch, index: str) -> IndexState:
        try:
            await client.indices.create(index=index, mappings=PAGE_INDEX_MAPPINGS)
        except (ApiError, TransportError) as exc:
            raise IndexSyncError(f"error creating index {index!r}: {exc}") from exc
        logger.info("Created index %r", index)
        return IndexState.PRESENT

    async def sync(
        self,
        client: AsyncElasticsearch,
        index: str,
        source: PageSource,
    ) -> SyncReport:
        state = await self.index_state(client, index)
        if state is IndexState.PRESENT:
            state = await self.delete_index(client, index)
        state = await self.create_index(client, index)

        report = SyncReport(final_state=state)
        try:
            await self.load_pages(client, index, source, report)
        except SQLAlchemyError as exc:
            raise IndexSyncError(f"error querying pages from DB: {exc}") from exc

        return report

    async def load_pages(
        self,
        client: AsyncElasticsearch,
        index: str,
        source: PageSource,
        report: SyncReport,
    ) -> None:
        async for page in source.iter_pages():
            try:
                await client.index(
                    index=index,
                    id=page.url,
                    document=page_to_document(page),
                    refresh=True,
                )
            except (ApiError, TransportError) as exc:
                logger.error("Error indexing %s: %s", page.url, exc)
                report.failed += 1
                continue
            logger.debug("Indexed page: %s", page.url)
            report.indexed += 1


# ---------------------------------------------------------------------
# Synchronizer
# ---------------------------------------------------------------------

class IndexSynchronizer:
    """
    Runs a sync strategy from the page store into one index.
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        session_factory: async_sessionmaker[AsyncSession],
        index: str | None = None,
        strategy: SyncStrategy | None = None,
    ) -> None:
        self._client = client
        self._session_factory = session_factory
        self.index = index or settings.es_index
        self.strategy = strategy or FullRebuildStrategy()

    async def sync(self) -> SyncReport:
        async with self._session_factory() as session:
            report = await self.strategy.sync(
                self._client,
                self.index,
                PageStore(session),
            )

        logger.info(
            "Synced %d pages to index %r (%d failed)",
            report.indexed,
            self.index,
            report.failed,
        )
        return report
