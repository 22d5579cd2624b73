"""
Query Dispatcher

Answers live search queries against one of two backends:

- ``engine``   : Elasticsearch multi-field relevance query
- ``fallback`` : case-sensitive substring scan of the page store

The backend is chosen once at startup by ``select_backend`` and never
re-checked per call, so query latency stays predictable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Literal, Optional, Union

from elasticsearch import AsyncElasticsearch
from elasticsearch.exceptions import ApiError, TransportError
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .engine import connect_search_engine
from ..config import Settings, settings as default_settings
from ..core.errors import SearchError, InvalidQueryError
from ..db import PageStore

logger = logging.getLogger("wikisearch.search")

# Relevance weights for the engine backend
ENGINE_FIELDS = ["title^3", "url^2", "content"]


class SearchHit(BaseModel):
    """A single search result as returned to the query-serving collaborator."""
    title: str
    url: str
    snippet: str

    model_config = ConfigDict(extra="forbid", frozen=True)


def make_snippet(content: str, length: int) -> str:
    """
    Collapse whitespace and cut at the last word boundary within ``length``.
    """
    text = " ".join(content.split())
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(" ", 1)[0]
    return cut + "…"


# ---------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------

@dataclass
class EngineBackend:
    client: AsyncElasticsearch
    index: str
    max_results: int
    snippet_length: int
    kind: Literal["engine"] = "engine"

    async def search(self, query: str) -> List[SearchHit]:
        try:
            resp = await self.client.search(
                index=self.index,
                query={"multi_match": {"query": query, "fields": ENGINE_FIELDS}},
                size=self.max_results,
                track_total_hits=True,
            )
        except (ApiError, TransportError) as exc:
            raise SearchError(f"search engine query failed: {exc}") from exc

        hits = []
        for hit in resp["hits"]["hits"]:
            source = hit.get("_source", {})
            hits.append(
                SearchHit(
                    title=source.get("title", ""),
                    url=source.get("url", ""),
                    snippet=make_snippet(source.get("content", ""), self.snippet_length),
                )
            )
        return hits


@dataclass
class FallbackBackend:
    session_factory: async_sessionmaker[AsyncSession]
    snippet_length: int
    kind: Literal["fallback"] = "fallback"

    async def search(self, query: str) -> List[SearchHit]:
        try:
            async with self.session_factory() as session:
                pages = await PageStore(session).search_content(query)
        except SQLAlchemyError as exc:
            raise SearchError(f"database search failed: {exc}") from exc

        return [
            SearchHit(
                title=page.title,
                url=page.url,
                snippet=make_snippet(page.content, self.snippet_length),
            )
            for page in pages
        ]


SearchBackend = Union[EngineBackend, FallbackBackend]


async def select_backend(
    session_factory: async_sessionmaker[AsyncSession],
    config: Optional[Settings] = None,
    client: Optional[AsyncElasticsearch] = None,
) -> SearchBackend:
    """
    Check the search engine once and pick the backend for this process.

    A pre-built ``client`` skips the check.
    """
    config = config or default_settings
    if client is None:
        client = await connect_search_engine(config)

    if client is None:
        logger.warning("Search engine unavailable; serving queries from the database")
        return FallbackBackend(
            session_factory=session_factory,
            snippet_length=config.snippet_length,
        )

    return EngineBackend(
        client=client,
        index=config.es_index,
        max_results=config.search_max_results,
        snippet_length=config.snippet_length,
    )


# ---------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------

class QueryDispatcher:
    """
    Read-only query front door; safe to share across concurrent requests.
    """

    def __init__(self, backend: SearchBackend) -> None:
        self._backend = backend

    @property
    def backend_kind(self) -> str:
        return self._backend.kind

    async def search(self, query: str) -> List[SearchHit]:
        """
        Return hits in backend order; an empty list when nothing matches.

        Raises
        ------
        InvalidQueryError
            If the query is blank.
        SearchError
            On backend transport or query failures.
        """
        if not query or not query.strip():
            raise InvalidQueryError("search query is empty")

        logger.info("Search query %r via %s backend", query, self._backend.kind)
        return await self._backend.search(query)
