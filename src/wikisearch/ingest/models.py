"""
Ingestion Data Models

Canonical in-memory representation of a page fetched from the content
source, before it is written to the page store.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, ConfigDict


class FetchedPage(BaseModel):
    """
    A single fetched article.

    Fields may be empty: the fetcher reports what it saw, and validity is
    decided by the resolver (title) and the page store (url/title/content).
    """

    url: str = Field(..., description="Canonical article URL; the page store key.")

    title: str = Field(
        default="",
        description="Text of the page's primary heading.",
    )

    content: str = Field(
        default="",
        description="Paragraph text from the main content region, newline separated.",
    )

    language: str = Field(
        ...,
        min_length=1,
        description="Language subdomain the page was fetched from.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
