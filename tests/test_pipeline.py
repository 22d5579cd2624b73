"""
Ingestion Pipeline Tests

The resolver is mocked; the page store and ledger run on SQLite.
"""

import httpx
import pytest
from unittest.mock import AsyncMock
from sqlalchemy import select

from wikisearch.core.errors import NoPageFoundError
from wikisearch.db import PageStore, ProcessedTerm, ProcessedTermLedger
from wikisearch.ingest.fetcher import PageFetcher
from wikisearch.ingest.models import FetchedPage
from wikisearch.ingest.pipeline import run_ingestion
from wikisearch.ingest.resolver import PageResolver


def write_log(tmp_path, terms):
    path = tmp_path / "search.log"
    path.write_text(
        "".join(f'query="{t}" from=127.0.0.1\n' for t in terms),
        encoding="utf-8",
    )
    return path


def resolved(term, language="en"):
    slug = term.capitalize()
    page = FetchedPage(
        url=f"https://{language}.wikipedia.org/wiki/{slug}",
        title=slug,
        content=f"{slug} article body.\n",
        language=language,
    )
    return page, language


@pytest.fixture
def resolver():
    mock = AsyncMock(spec=PageResolver)
    mock.resolve.side_effect = lambda term, languages: resolved(term)
    return mock


async def ledger_terms(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(ProcessedTerm.search_term))
        return sorted(result.scalars().all())


@pytest.mark.asyncio
async def test_new_terms_are_stored_and_marked(tmp_path, session_factory, resolver):
    log = write_log(tmp_path, ["Golang", "golang", "Rust"])

    report = await run_ingestion(log, session_factory, resolver, ["da", "en"])

    assert (report.extracted, report.skipped, report.stored, report.failed) == (2, 0, 2, 0)
    assert await ledger_terms(session_factory) == ["golang", "rust"]
    async with session_factory() as session:
        assert await PageStore(session).count() == 2


@pytest.mark.asyncio
async def test_processed_term_skips_resolver_and_store(tmp_path, session_factory, resolver):
    async with session_factory() as session:
        ledger = ProcessedTermLedger(session)
        await ledger.mark_processed("golang")
        await ledger.commit()

    log = write_log(tmp_path, ["golang"])
    report = await run_ingestion(log, session_factory, resolver, ["da", "en"])

    assert report.skipped == 1
    assert report.stored == 0
    resolver.resolve.assert_not_called()
    assert await ledger_terms(session_factory) == ["golang"]
    async with session_factory() as session:
        assert await PageStore(session).count() == 0


@pytest.mark.asyncio
async def test_unresolvable_term_is_not_marked(tmp_path, session_factory, resolver):
    def resolve(term, languages):
        if term == "xyzzy":
            raise NoPageFoundError(term)
        return resolved(term)

    resolver.resolve.side_effect = resolve
    log = write_log(tmp_path, ["xyzzy", "golang"])

    report = await run_ingestion(log, session_factory, resolver, ["da", "en"])

    assert report.stored == 1
    assert report.failed == 1
    assert await ledger_terms(session_factory) == ["golang"]


@pytest.mark.asyncio
async def test_page_without_content_is_rejected(tmp_path, session_factory, resolver):
    resolver.resolve.side_effect = lambda term, languages: (
        FetchedPage(
            url="https://en.wikipedia.org/wiki/Stub",
            title="Stub",
            content="",
            language="en",
        ),
        "en",
    )
    log = write_log(tmp_path, ["stub"])

    report = await run_ingestion(log, session_factory, resolver, ["en"])

    assert report.failed == 1
    assert await ledger_terms(session_factory) == []
    async with session_factory() as session:
        assert await PageStore(session).count() == 0


@pytest.mark.asyncio
async def test_missing_log_is_a_noop(tmp_path, session_factory, resolver):
    report = await run_ingestion(tmp_path / "missing.log", session_factory, resolver, ["en"])

    assert report.extracted == 0
    resolver.resolve.assert_not_called()


@pytest.mark.asyncio
async def test_control_character_term_does_not_end_the_run(tmp_path, session_factory):
    article = (
        '<h1 id="firstHeading">Golang</h1>'
        '<div class="mw-parser-output"><p>Go is a language.</p></div>'
    )
    fetcher = PageFetcher(
        timeout=5,
        domain="wikipedia.org",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text=article)),
    )
    log = write_log(tmp_path, ["foo\tbar", "golang"])

    report = await run_ingestion(log, session_factory, PageResolver(fetcher), ["da", "en"])

    assert report.stored == 1
    assert report.failed == 1
    assert await ledger_terms(session_factory) == ["golang"]


@pytest.mark.asyncio
async def test_unexpected_error_is_counted_and_run_continues(tmp_path, session_factory, resolver):
    def resolve(term, languages):
        if term == "broken":
            raise RuntimeError("parser exploded")
        return resolved(term)

    resolver.resolve.side_effect = resolve
    log = write_log(tmp_path, ["broken", "golang", "rust"])

    report = await run_ingestion(log, session_factory, resolver, ["en"])

    assert report.failed == 1
    assert report.stored == 2
    assert await ledger_terms(session_factory) == ["golang", "rust"]
