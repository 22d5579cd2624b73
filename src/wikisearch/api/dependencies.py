from fastapi import Request

from ..search.dispatcher import QueryDispatcher


def get_dispatcher(request: Request) -> QueryDispatcher:
    # Bound once in the app lifespan; never re-checked per request
    return request.app.state.dispatcher
