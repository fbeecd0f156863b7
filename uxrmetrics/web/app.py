"""FastAPI application for the UXR Metrics API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from uxrmetrics.config import AppConfig, get_config
from uxrmetrics.core.exceptions import (
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    UnauthorizedError,
)
from uxrmetrics.core.logging import RequestLoggingMiddleware, configure_logging
from uxrmetrics.db.connection import close_db, init_db
from uxrmetrics.web.routes import (
    analytics,
    auth,
    export,
    health,
    integrations,
    projects,
    taxonomy,
    tokens,
    uploads,
)

logger = logging.getLogger(__name__)

ROUTERS = (
    auth.router,
    projects.router,
    taxonomy.router,
    tokens.router,
    uploads.router,
    analytics.router,
    export.router,
    integrations.router,
    health.router,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions onto ``{"error": ...}`` responses."""

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return _error(401, str(exc))

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError):
        return _error(400, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error(409, str(exc))

    @app.exception_handler(ExternalServiceError)
    async def external_service_handler(request: Request, exc: ExternalServiceError):
        logger.warning("External service failure (%s): %s", exc.service, exc)
        return _error(502, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    config.uploads.directory.mkdir(parents=True, exist_ok=True)
    if config.environment != "production":
        # Production schemas are created with `uxrmetrics init`
        await init_db()
    yield
    await close_db()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the API application (use with ``uvicorn --factory``)."""
    config = config or get_config()
    configure_logging(log_level=config.log_level, json_logs=config.json_logs)

    app = FastAPI(
        title="UXR Metrics",
        description="Tracking dashboard API for UX research projects",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    for router in ROUTERS:
        app.include_router(router)

    # Prometheus Metrics
    Instrumentator().instrument(app).expose(app, include_in_schema=False)

    app.mount(
        config.uploads.url_prefix,
        StaticFiles(directory=str(config.uploads.directory), check_dir=False),
        name="uploads",
    )
    return app
