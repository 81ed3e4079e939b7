"""
FastAPI application entrypoint for the offer insights API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.dependencies import get_benchmark_store, get_offer_store, get_report_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    # Store construction creates the shared SQLite schema.
    get_offer_store()
    get_benchmark_store()
    get_report_store()
    logger.info(
        "Offer insights API ready (model=%s, quota=%d per %gs, db=%s)",
        settings.gemini.model_name,
        settings.rate_limit.max_requests,
        settings.rate_limit.window_seconds,
        settings.database_path,
    )
    yield


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Offer Insights API",
        version="0.1.0",
        description="AI performance reports for marketing offers.",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
