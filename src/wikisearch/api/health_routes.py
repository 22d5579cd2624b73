from typing import Annotated

from fastapi import APIRouter, Depends

from .dependencies import get_dispatcher
from .models import HealthResponse
from ..search.dispatcher import QueryDispatcher

router = APIRouter(tags=["health"])

@router.get("/health", response_model=HealthResponse)
def health(dispatcher: Annotated[QueryDispatcher, Depends(get_dispatcher)]):
    return HealthResponse(search_backend=dispatcher.backend_kind)
