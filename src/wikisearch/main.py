"""
Search Service Entry Point

This module defines the FastAPI application instance, registers routers,
configures global exception handling, and provides a test-friendly
application factory.

Startup Order
-------------
1. Database engine and session factory
2. Search backend selection (engine health check, at most once per process)
3. Query dispatcher bound to the chosen backend
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .core.errors import unhandled_exception_handler
from .db import make_engine, make_session_factory
from .search.dispatcher import EngineBackend, QueryDispatcher, select_backend
from .api import health_routes, search_routes


logger = logging.getLogger("wikisearch.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Starting wikisearch")

    engine = make_engine()
    session_factory = make_session_factory(engine)
    backend = await select_backend(session_factory)
    app.state.dispatcher = QueryDispatcher(backend)
    logger.info("Serving search from the %s backend", backend.kind)

    try:
        yield
    finally:
        logger.info("Shutting down wikisearch")
        if isinstance(backend, EngineBackend):
            await backend.client.close()
        await engine.dispose()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    app = FastAPI(
        title="wikisearch",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_routes.router)
    app.include_router(search_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
