"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import cleanup_dependencies
from src.api.routes import health, outdated_version_alerts, resources
from src.config.settings import get_settings
from src.outdated_alerts.errors import OutdatedAlertError

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Version alerts API starting up")

    yield

    logger.info("Version alerts API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "outdated-version-alerts", "description": "Outdated version alerts and triggers"},
        {"name": "resources", "description": "Service template version updates"},
    ]

    app = FastAPI(
        title="Version Alerts API",
        description="""
Tracks services that are behind their service template or an installed
plugin, and emits tech debt events when new alerts are created.

## Authentication

Requires `X-API-KEY` header for all requests except `/health`.
Writes additionally require the acting user in `X-USER-ID`.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # CORS origins from CORS_ORIGINS env var, comma-separated
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )

        # Bind to structlog contextvars for automatic log correlation
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()

    @app.exception_handler(OutdatedAlertError)
    async def alert_error_handler(request: Request, exc: OutdatedAlertError):
        logger.warning(f"Alert domain error: {exc}")
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc), "error_type": "validation"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(outdated_version_alerts.router, tags=["outdated-version-alerts"])
    app.include_router(resources.router, tags=["resources"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Version Alerts API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
