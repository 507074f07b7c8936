"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    build_coordinator,
    get_agent_client,
    get_analysis_service,
    get_asset_resolver,
    get_upload_client,
    get_upload_service,
)
from .config import get_app_settings

__all__ = [
    "build_coordinator",
    "get_agent_client",
    "get_analysis_service",
    "get_app_settings",
    "get_asset_resolver",
    "get_upload_client",
    "get_upload_service",
]
