"""
Command-line entry points for the external scheduler.

    wikisearch init-db          create the pages / processed_searches tables
    wikisearch ingest [--log]   one sequential ingestion pass over the search log
    wikisearch sync             full rebuild of the search index
    wikisearch search QUERY     run a query through the dispatcher
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import settings
from .core.errors import IndexSyncError, SearchError
from .db import Base, make_engine, make_session_factory
from .ingest.fetcher import PageFetcher
from .ingest.pipeline import run_ingestion
from .ingest.resolver import PageResolver
from .search.dispatcher import EngineBackend, QueryDispatcher, select_backend
from .search.engine import connect_search_engine
from .search.index_sync import IndexSynchronizer

logger = logging.getLogger("wikisearch.cli")


async def init_db() -> int:
    engine = make_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()
    logger.info("Database tables ready")
    return 0


async def ingest(log_path: str) -> int:
    engine = make_engine()
    try:
        resolver = PageResolver(PageFetcher())
        report = await run_ingestion(
            log_path,
            make_session_factory(engine),
            resolver,
            settings.languages,
        )
    finally:
        await engine.dispose()
    print(
        f"extracted={report.extracted} skipped={report.skipped} "
        f"stored={report.stored} failed={report.failed}"
    )
    return 0


async def sync() -> int:
    client = await connect_search_engine(settings)
    if client is None:
        logger.error("Search engine unreachable; sync aborted")
        return 1

    engine = make_engine()
    try:
        synchronizer = IndexSynchronizer(client, make_session_factory(engine))
        report = await synchronizer.sync()
    except IndexSyncError as exc:
        logger.error("Index sync failed: %s", exc)
        return 1
    finally:
        await client.close()
        await engine.dispose()

    print(f"indexed={report.indexed} failed={report.failed}")
    return 0


async def search(query: str) -> int:
    engine = make_engine()
    backend = await select_backend(make_session_factory(engine), settings)
    try:
        hits = await QueryDispatcher(backend).search(query)
    except SearchError as exc:
        logger.error("Search failed: %s", exc)
        return 1
    finally:
        if isinstance(backend, EngineBackend):
            await backend.client.close()
        await engine.dispose()

    if not hits:
        print("No results.")
    for hit in hits:
        print(f"{hit.title}\n  {hit.url}\n  {hit.snippet}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wikisearch", description="Wiki ingestion and search")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables")

    ingest_parser = sub.add_parser("ingest", help="Scrape pages for new search-log terms")
    ingest_parser.add_argument(
        "--log",
        default=settings.search_log_path,
        help="Search log to read terms from",
    )

    sub.add_parser("sync", help="Rebuild the search index from the page store")

    search_parser = sub.add_parser("search", help="Run a search query")
    search_parser.add_argument("query", help="Free-text query")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "init-db":
        return asyncio.run(init_db())
    if args.command == "ingest":
        return asyncio.run(ingest(args.log))
    if args.command == "sync":
        return asyncio.run(sync())
    return asyncio.run(search(args.query))


if __name__ == "__main__":
    sys.exit(main())
