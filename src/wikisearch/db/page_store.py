"""
Page Store

PostgreSQL-backed storage for fetched pages, keyed by URL.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import AsyncIterator, List

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Page
from .session import dialect_insert, dialect_name
from ..core.errors import InvalidPageError
from ..ingest.models import FetchedPage

logger = logging.getLogger("wikisearch.store")


class PageStore:
    """
    Upsert-only page storage.

    Exactly one row exists per URL; the most recent successful fetch wins.
    Pages are never deleted here.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize with an async database session.

        Parameters
        ----------
        session : AsyncSession
            SQLAlchemy async session for database operations.
        """
        self._session = session

    async def commit(self) -> None:
        await self._session.commit()

    async def upsert_page(self, page: FetchedPage) -> None:
        """
        Insert a page, or overwrite the existing row with the same URL.

        Raises
        ------
        InvalidPageError
            If url, title or content is empty. Nothing is written.
        """
        if not page.url or not page.title or not page.content:
            raise InvalidPageError(page.url)

        now = datetime.now(timezone.utc).replace(tzinfo=None)
        stmt = dialect_insert(self._session, Page).values(
            url=page.url,
            title=page.title,
            content=page.content,
            language=page.language,
            last_updated=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Page.url],
            set_={
                "title": stmt.excluded.title,
                "content": stmt.excluded.content,
                "language": stmt.excluded.language,
                "last_updated": now,
            },
        )
        await self._session.execute(stmt)
        logger.info("Saved page [%s]: %s", page.language, page.title)

    async def get_page(self, url: str) -> Page | None:
        result = await self._session.execute(select(Page).where(Page.url == url))
        return result.scalar_one_or_none()

    async def iter_pages(self) -> AsyncIterator[Page]:
        """
        Stream every stored page without loading the table into memory.
        """
        result = await self._session.stream_scalars(
            select(Page).execution_options(yield_per=100)
        )
        async for page in result:
            yield page

    async def search_content(self, query: str) -> List[Page]:
        """
        Case-sensitive substring match against page content.

        Every matching row comes back, in storage order; there is no ranking
        and no cap. LIKE wildcards in the query match literally.
        """
        if dialect_name(self._session) == "sqlite":
            # SQLite LIKE ignores ASCII case; instr() does not
            condition = func.instr(Page.content, query) > 0
        else:
            condition = Page.content.contains(query, autoescape=True)

        stmt = select(Page).where(condition)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(Page))
        return result.scalar() or 0
