"""
Page Resolver

Resolves a term to an article by trying languages in priority order.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Tuple

from .fetcher import PageFetcher, language_host
from .models import FetchedPage
from ..core.errors import FetchError, NoPageFoundError

logger = logging.getLogger("wikisearch.ingest")

# First letter or digit of each word. Underscores, apostrophes, periods and
# colons stay inside a word; any other punctuation starts a new one.
WORD_START = re.compile(r"(?:^|(?<=[^\w'’.:]))([^\W_])")


def build_article_url(term: str, language: str, domain: Optional[str] = None) -> str:
    """
    Canonical article URL for a term in one language.

    Spaces become underscores and each word is title-cased the way the
    source names its articles: ``new york`` -> ``New_york``,
    ``spider-man`` -> ``Spider-Man``.
    """
    slug = term.strip().replace(" ", "_")
    slug = WORD_START.sub(lambda m: m.group(1).upper(), slug)
    return f"https://{language_host(language, domain)}/wiki/{slug}"


class PageResolver:
    """
    Sequential, short-circuiting language cascade over a PageFetcher.

    Languages are never tried in parallel: the source is rate-sensitive.
    """

    def __init__(self, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher

    async def resolve(
        self,
        term: str,
        languages: Sequence[str],
    ) -> Tuple[FetchedPage, str]:
        """
        Return the first ``(page, language)`` with a successful fetch and a
        non-empty title.

        Raises
        ------
        NoPageFoundError
            If no language yields a valid page.
        """
        for language in languages:
            url = build_article_url(term, language, self._fetcher.domain)
            logger.info("Trying to scrape: %s", url)
            try:
                page = await self._fetcher.fetch(url, language)
            except FetchError as exc:
                logger.info("Failed scraping %r (%s): %s", term, language, exc)
                continue

            if page.title:
                return page, language
            logger.info("Rejected %s (%s): empty title", url, language)

        raise NoPageFoundError(term)
