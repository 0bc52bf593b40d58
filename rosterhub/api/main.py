from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from rosterhub.api.routes import register_routes
from rosterhub.core.config import Settings, get_settings
from rosterhub.core.logging import setup_logging
from rosterhub.infrastructure.db.session import Database
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """Application factory for the public API.

    The database is built from ``settings`` at startup unless one is passed in,
    and is always disposed on shutdown.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "database", None) is None:
            app.state.database = Database(settings)
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
        )
        try:
            yield
        finally:
            await app.state.database.dispose()
            app.state.database = None
            logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.database = database

    cors_origins = [
        "http://localhost:3000",  # React dev server
        "http://127.0.0.1:3000",
    ]
    if settings.environment in ["local", "development"]:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


app = create_app()
