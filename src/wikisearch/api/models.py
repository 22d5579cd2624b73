"""
API Models

Pydantic response models for the search endpoint.
"""

from __future__ import annotations

from typing import List, Literal
from pydantic import BaseModel, ConfigDict

from ..search.dispatcher import SearchHit


class SearchResponse(BaseModel):
    """
    Search results for one query. An empty ``results`` list is a valid
    "no results" answer.
    """
    query: str
    backend: Literal["engine", "fallback"]
    results: List[SearchHit]

    model_config = ConfigDict(extra="forbid")


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    search_backend: Literal["engine", "fallback"]
