"""
Error Taxonomy and Global Error Handling

This module defines the exception hierarchy shared by the ingestion and
search pipeline, plus the application-wide FastAPI exception handler.

Taxonomy
--------
- FetchError / PageNotFoundError : transient-external and not-found
  conditions for a single language attempt
- NoPageFoundError                : no language yielded a valid page
- InvalidPageError                : validation, rejected before persistence
- IndexSyncError                  : structural failure, aborts a sync
- SearchError / InvalidQueryError : query-time failures

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("wikisearch.errors")


# ---------------------------------------------------------------------
# Exception Hierarchy
# ---------------------------------------------------------------------

class WikiSearchError(Exception):
    """Base class for all pipeline errors."""


class FetchError(WikiSearchError):
    """A page could not be fetched in one language."""

    def __init__(self, url: str, language: str, reason: str) -> None:
        super().__init__(f"failed to fetch {url} ({language}): {reason}")
        self.url = url
        self.language = language
        self.reason = reason


class PageNotFoundError(FetchError):
    """The content source answered 404 for this language."""

    def __init__(self, url: str, language: str) -> None:
        super().__init__(url, language, "page not found (404)")


class NoPageFoundError(WikiSearchError):
    """Every configured language failed to produce a valid page."""

    def __init__(self, term: str) -> None:
        super().__init__(f"no valid page found for term '{term}'")
        self.term = term


class InvalidPageError(WikiSearchError):
    """Page data is missing a url, title or content."""

    def __init__(self, url: Optional[str] = None) -> None:
        super().__init__(f"invalid page data (url={url!r})")
        self.url = url


class IndexSyncError(WikiSearchError):
    """A structural step of the index rebuild failed."""


class SearchError(WikiSearchError):
    """A search backend failed to answer a query."""


class InvalidQueryError(SearchError):
    """The query text is empty or malformed."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net for any exception not
    otherwise handled by route-level handlers.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
