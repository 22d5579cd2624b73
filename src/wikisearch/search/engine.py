"""
Search Engine Connection

Builds the Elasticsearch client and pings it. The cluster may listen on
plain HTTP or on HTTPS with a self-signed certificate, so both schemes are
tried on every attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from elasticsearch import AsyncElasticsearch
from elasticsearch.exceptions import ApiError, TransportError

from ..config import Settings, settings as default_settings

logger = logging.getLogger("wikisearch.search")


# Fixed schema of the page index
PAGE_INDEX_MAPPINGS = {
    "properties": {
        "title": {"type": "text"},
        "url": {"type": "keyword"},
        "content": {"type": "text"},
        "language": {"type": "keyword"},
        "last_updated": {"type": "date"},
    }
}


def build_client(url: str, config: Settings) -> AsyncElasticsearch:
    options = {}
    if url.startswith("https://"):
        # Cluster ships a self-signed certificate
        options = {"verify_certs": False, "ssl_show_warn": False}

    return AsyncElasticsearch(
        url,
        basic_auth=(config.es_username, config.es_password.get_secret_value()),
        request_timeout=config.es_request_timeout,
        **options,
    )


def candidate_urls(config: Settings) -> List[str]:
    return [
        f"http://{config.es_host}:{config.es_port}",
        f"https://{config.es_host}:{config.es_port}",
    ]


async def connect_search_engine(
    config: Optional[Settings] = None,
) -> Optional[AsyncElasticsearch]:
    """
    Return a connected client, or None if the engine is unreachable.

    Callers treat None as "use the fallback store scan".
    """
    config = config or default_settings
    attempts = max(config.es_connect_retries, 1)

    for attempt in range(1, attempts + 1):
        for url in candidate_urls(config):
            client = build_client(url, config)
            try:
                await client.info()
            except (ApiError, TransportError) as exc:
                logger.info("Error connecting to Elasticsearch via %s: %s", url, exc)
                await client.close()
                continue

            logger.info("Connected to Elasticsearch via %s", url)
            return client

        if attempt < attempts:
            logger.warning(
                "Could not connect to Elasticsearch (attempt %d/%d). Retrying in %.1fs",
                attempt,
                attempts,
                config.es_retry_delay,
            )
            await asyncio.sleep(config.es_retry_delay)

    logger.warning(
        "Failed to connect to Elasticsearch after %d attempts; using database search fallback",
        attempts,
    )
    return None
