"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from canvass_api.core.background import InProcessScoreQueue
from canvass_api.core.config import get_settings
from canvass_api.core.database import dispose_engine, get_session_factory, init_engine
from canvass_api.core.errors import CanvassError, ValidationFailedError
from canvass_api.core.logging import setup_logging
from canvass_api.lib.geocoder import get_configured_geocoder
from canvass_api.schemas.common import ErrorResponse


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: engine, geocoder and aggregation queue."""
    from canvass_api.services.leaderboard_service import on_score_created

    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)

    app.state.geocoder = get_configured_geocoder(settings)
    app.state.task_queue = InProcessScoreQueue(get_session_factory(), on_score_created)

    yield

    # Let in-flight aggregation finish before the engine goes away
    await app.state.task_queue.wait_all()
    await dispose_engine()


def register_exception_handlers(app: FastAPI) -> None:
    """Render core failures as ``ErrorResponse`` bodies."""

    @app.exception_handler(CanvassError)
    async def canvass_error_handler(request: Request, exc: CanvassError) -> JSONResponse:
        errors = None
        if isinstance(exc, ValidationFailedError):
            errors = [{"field": name, "message": message} for name, message in exc.errors.items()]
        body = ErrorResponse(detail=exc.message, code=exc.code, errors=errors)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=headers)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Canvass API",
        description="Canvassing visit ingestion, address reconciliation and volunteer leaderboards",
        version="0.1.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    from canvass_api.api.router import create_router

    app.include_router(create_router(settings))

    return app
