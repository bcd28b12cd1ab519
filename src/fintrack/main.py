"""fintrack FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fintrack.api import health_router, main_router
from fintrack.core.config import get_settings
from fintrack.core.logging_config import LoggingConfig, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:  # noqa: ARG001
    """Manage application lifecycle."""
    settings = get_settings()
    logger.info("Starting fintrack application...")

    if settings.ai_enabled:
        logger.info("AI extraction enabled (model: %s)", settings.gemini_model)
    else:
        logger.warning("GEMINI_API_KEY not set - only offline extraction available")

    yield

    logger.info("Shutting down fintrack application...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(
        LoggingConfig(log_level=settings.log_level, log_format=settings.log_format)
    )

    app = FastAPI(
        title="fintrack",
        version=settings.app_version,
        description="Transaction extraction API for a personal finance tracker",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(main_router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "fintrack.main:app",
        host="0.0.0.0",  # noqa: S104
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
