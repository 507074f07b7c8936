"""
FastAPI application entrypoint for the DataLens insights service.
"""

from __future__ import annotations

from fastapi import FastAPI

from datalens.api.routes import router as api_router
from datalens.core.config import get_settings
from datalens.core.logging import configure_logging


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="DataLens",
        version="0.1.0",
        description="Upload spreadsheets and generate AI-driven data insights.",
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
