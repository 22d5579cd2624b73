"""
Search Routes

Forwards the free-text ``q`` parameter verbatim to the query dispatcher.
Dispatcher failures are left to the global exception handler, which
returns a generic 500 without internal detail.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .dependencies import get_dispatcher
from .models import SearchResponse
from ..search.dispatcher import QueryDispatcher

router = APIRouter(prefix="/search", tags=["search"])


@router.get(
    "",
    response_model=SearchResponse,
    summary="Full-text search over stored pages",
    status_code=status.HTTP_200_OK,
)
async def search(
    dispatcher: Annotated[QueryDispatcher, Depends(get_dispatcher)],
    q: Annotated[str, Query(description="Free-text search query")] = "",
) -> SearchResponse:
    if not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No search query provided",
        )

    results = await dispatcher.search(q)
    return SearchResponse(
        query=q,
        backend=dispatcher.backend_kind,
        results=results,
    )
