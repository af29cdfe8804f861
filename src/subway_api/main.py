"""FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from subway_api.config import get_settings
from subway_api.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from subway_api.routers.subway import router as subway_router
from subway_api.routers.weather import router as weather_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()
    settings = get_settings()
    logger.info(
        "Starting Subway Arrivals API",
        feed_count=len(settings.feed_sources),
        feed_timeout_sec=settings.feed_timeout_sec,
    )

    yield

    logger.info("Shutting down Subway Arrivals API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Real-time NYC subway arrivals aggregated from MTA GTFS-Realtime feeds",
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Any:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        bind_request_context(request_id=request_id, path=request.url.path)

        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(subway_router)
    app.include_router(weather_router)

    @app.get("/health", tags=["meta"])
    async def health_check() -> dict[str, Any]:
        """Health check endpoint returning application status."""
        settings = get_settings()
        return {
            "service": settings.app_name,
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "feeds": {
                    "configured": len(settings.feed_sources),
                    "timeoutSec": settings.feed_timeout_sec,
                },
            },
        }

    @app.get("/meta/attribution", tags=["meta"])
    async def get_attribution() -> dict[str, str]:
        """Get data attribution information for the MTA feeds."""
        settings = get_settings()
        return {
            "attribution": settings.data_attribution,
            "termsUrl": settings.mta_terms_url,
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            },
        )

    return app


app = create_app()
