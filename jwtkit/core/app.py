"""FastAPI application factory for the jwtkit session API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jwtkit.api.routes_session import router as session_router
from jwtkit.core.logging import setup_logging
from jwtkit.core.settings import DebounceSettings, ToolkitSettings
from jwtkit.session.edit_session import EditSession


def create_app(
    settings: ToolkitSettings | None = None,
    debounce: DebounceSettings | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or ToolkitSettings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        session = EditSession(settings, debounce)
        await session.start()
        app.state.edit_session = session
        try:
            yield
        finally:
            await session.aclose()

    app = FastAPI(
        title="jwtkit",
        version="0.1.0",
        lifespan=lifespan,
    )

    origins = settings.get_cors_origin_list()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT"],
            allow_headers=["Content-Type"],
        )

    app.include_router(session_router)

    return app
