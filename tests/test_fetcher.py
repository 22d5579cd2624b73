import httpx
import pytest

from wikisearch.core.errors import FetchError, PageNotFoundError
from wikisearch.ingest.fetcher import PageFetcher, parse_article

ARTICLE_HTML = """
<html><body>
  <h1 id="firstHeading"><span>Go (programming language)</span></h1>
  <div id="mw-content-text">
    <div class="mw-parser-output">
      <p>Go is a statically typed language.</p>
      <table><tr><td><p>Infobox text</p></td></tr></table>
      <p>It was designed at Google.</p>
    </div>
  </div>
  <p>Footer paragraph outside the content region.</p>
</body></html>
"""


def fetcher_for(handler):
    return PageFetcher(timeout=5, domain="wikipedia.org", transport=httpx.MockTransport(handler))


def test_parse_article_extracts_heading_and_paragraphs():
    title, content = parse_article(ARTICLE_HTML)

    assert title == "Go (programming language)"
    assert content == (
        "Go is a statically typed language.\n"
        "Infobox text\n"
        "It was designed at Google.\n"
    )
    assert "Footer" not in content


def test_parse_article_without_heading_has_empty_title():
    title, content = parse_article("<html><body><p>nothing</p></body></html>")

    assert title == ""
    assert content == ""


@pytest.mark.asyncio
async def test_fetch_returns_page():
    def handler(request):
        assert request.url.host == "en.wikipedia.org"
        return httpx.Response(200, text=ARTICLE_HTML)

    page = await fetcher_for(handler).fetch("https://en.wikipedia.org/wiki/Golang", "en")

    assert page.url == "https://en.wikipedia.org/wiki/Golang"
    assert page.language == "en"
    assert page.title == "Go (programming language)"
    assert "designed at Google" in page.content


@pytest.mark.asyncio
async def test_fetch_404_raises_page_not_found():
    fetcher = fetcher_for(lambda request: httpx.Response(404, text=ARTICLE_HTML))

    with pytest.raises(PageNotFoundError) as exc_info:
        await fetcher.fetch("https://da.wikipedia.org/wiki/Golang", "da")

    assert exc_info.value.language == "da"


@pytest.mark.asyncio
async def test_fetch_server_error_raises_fetch_error():
    fetcher = fetcher_for(lambda request: httpx.Response(503))

    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://en.wikipedia.org/wiki/Golang", "en")

    assert not isinstance(exc_info.value, PageNotFoundError)


@pytest.mark.asyncio
async def test_fetch_transport_error_raises_fetch_error():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(FetchError):
        await fetcher_for(handler).fetch("https://en.wikipedia.org/wiki/Golang", "en")


@pytest.mark.asyncio
async def test_fetch_refuses_redirect_to_other_language():
    seen = []

    def handler(request):
        seen.append(request.url.host)
        if request.url.host == "da.wikipedia.org":
            return httpx.Response(
                301, headers={"Location": "https://en.wikipedia.org/wiki/Golang"}
            )
        return httpx.Response(200, text=ARTICLE_HTML)

    with pytest.raises(FetchError):
        await fetcher_for(handler).fetch("https://da.wikipedia.org/wiki/Golang", "da")

    assert seen == ["da.wikipedia.org"]


@pytest.mark.asyncio
async def test_fetch_follows_same_domain_redirect():
    def handler(request):
        if request.url.path == "/wiki/Golang":
            return httpx.Response(
                301, headers={"Location": "https://en.wikipedia.org/wiki/Go_(programming_language)"}
            )
        return httpx.Response(200, text=ARTICLE_HTML)

    page = await fetcher_for(handler).fetch("https://en.wikipedia.org/wiki/Golang", "en")

    # Stored under the requested URL so re-ingestion upserts the same row
    assert page.url == "https://en.wikipedia.org/wiki/Golang"
    assert page.title == "Go (programming language)"


@pytest.mark.asyncio
async def test_fetch_invalid_url_raises_fetch_error():
    fetcher = fetcher_for(lambda request: httpx.Response(200, text=ARTICLE_HTML))

    with pytest.raises(FetchError):
        await fetcher.fetch("https://en.wikipedia.org/wiki/Foo\tbar", "en")
