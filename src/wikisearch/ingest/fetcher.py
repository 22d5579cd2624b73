"""
Page Fetcher

Fetches a single article from one language subdomain of the content source
and extracts its title and body text.

Responsibilities
----------------
- Bound every request with an explicit timeout
- Refuse requests (including redirects) outside the language's subdomain
- Map HTTP 404 to PageNotFoundError and other failures to FetchError
- Extract ``#firstHeading`` as title and ``div.mw-parser-output p`` as content
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from bs4 import BeautifulSoup

from .models import FetchedPage
from ..config import settings
from ..core.errors import FetchError, PageNotFoundError

logger = logging.getLogger("wikisearch.fetcher")


class DomainNotAllowedError(httpx.RequestError):
    """Raised from the request hook when a request leaves the allowed host."""


def language_host(language: str, domain: Optional[str] = None) -> str:
    return f"{language}.{domain or settings.source_domain}"


def parse_article(html: str) -> tuple[str, str]:
    """
    Return ``(title, content)`` from an article's HTML.

    Content is every paragraph inside the main content region, each
    followed by a newline.
    """
    soup = BeautifulSoup(html, "html.parser")

    heading = soup.select_one("#firstHeading")
    title = heading.get_text().strip() if heading else ""

    content = ""
    for region in soup.select("div.mw-parser-output"):
        for para in region.find_all("p"):
            content += para.get_text() + "\n"

    return title, content


class PageFetcher:
    """
    HTTP fetcher scoped to one language subdomain per call.

    A transport can be injected for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        domain: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.fetch_timeout
        self.domain = domain or settings.source_domain
        self._transport = transport

    async def fetch(self, url: str, language: str) -> FetchedPage:
        allowed_host = language_host(language, self.domain)

        async def _restrict_host(request: httpx.Request) -> None:
            if request.url.host != allowed_host:
                raise DomainNotAllowedError(
                    f"host {request.url.host} is outside {allowed_host}",
                    request=request,
                )

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
            event_hooks={"request": [_restrict_host]},
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(url)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                # InvalidURL covers terms with control characters
                raise FetchError(url, language, str(exc)) from exc

        if resp.status_code == 404:
            raise PageNotFoundError(url, language)
        if resp.is_error:
            raise FetchError(url, language, f"HTTP {resp.status_code}")

        title, content = parse_article(resp.text)
        logger.debug("Fetched %s (%s): title=%r", url, language, title)
        return FetchedPage(url=url, title=title, content=content, language=language)
