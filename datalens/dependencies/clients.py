"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from datalens.clients import AgentClient, AssetUploadClient
from datalens.core.config import AppSettings, get_settings
from datalens.core.errors import ConfigurationError
from datalens.services import (
    AnalysisCoordinator,
    AnalysisService,
    AssetIdResolver,
    InsightsNormalizer,
    UploadService,
)
from datalens.utils.http import RetryConfig


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def build_asset_resolver(settings: AppSettings) -> AssetIdResolver:
    return AssetIdResolver(
        key_names=settings.resolver.key_names,
        min_length=settings.resolver.min_length,
        max_depth=settings.resolver.max_depth,
    )


def build_upload_client(settings: AppSettings) -> AssetUploadClient:
    return AssetUploadClient(
        upload_url=settings.lyzr.upload_url,
        api_key=settings.lyzr.api_key,
        timeout=settings.lyzr.timeout_seconds,
    )


def build_agent_client(settings: AppSettings) -> AgentClient:
    return AgentClient(
        inference_url=settings.lyzr.inference_url,
        api_key=settings.lyzr.api_key,
        user_id=settings.lyzr.user_id,
        timeout=settings.lyzr.timeout_seconds,
        retry_config=RetryConfig(
            attempts=settings.lyzr.invoke_attempts,
            backoff_seconds=settings.lyzr.invoke_backoff_seconds,
        ),
    )


def build_coordinator(settings: AppSettings) -> AnalysisCoordinator:
    """Wire a coordinator that talks to the hosted services directly.

    Raises ``ConfigurationError`` when no API key is configured.
    """
    if not settings.lyzr.api_key:
        raise ConfigurationError(
            "LYZR_API_KEY not configured. Set it in the environment or .env file."
        )
    return AnalysisCoordinator(
        uploader=build_upload_client(settings),
        agent=build_agent_client(settings),
        agent_id=settings.lyzr.agent_id,
        prompt=settings.lyzr.analysis_prompt,
        resolver=build_asset_resolver(settings),
        normalizer=InsightsNormalizer(),
    )


@lru_cache()
def get_asset_resolver() -> AssetIdResolver:
    """Provide the configured asset identifier resolver."""
    return build_asset_resolver(_settings())


@lru_cache()
def get_upload_client() -> AssetUploadClient:
    """Provide the asset upload client."""
    return build_upload_client(_settings())


@lru_cache()
def get_agent_client() -> AgentClient:
    """Provide the agent inference client."""
    return build_agent_client(_settings())


def get_upload_service() -> UploadService:
    """Build an upload service using configured clients."""
    return UploadService(get_upload_client(), get_asset_resolver())


def get_analysis_service() -> AnalysisService:
    """Build an analysis service using the configured agent."""
    settings = _settings()
    return AnalysisService(
        get_agent_client(),
        InsightsNormalizer(),
        agent_id=settings.lyzr.agent_id,
        default_prompt=settings.lyzr.analysis_prompt,
    )


__all__ = [
    "build_agent_client",
    "build_asset_resolver",
    "build_coordinator",
    "build_upload_client",
    "get_agent_client",
    "get_analysis_service",
    "get_asset_resolver",
    "get_upload_client",
    "get_upload_service",
]
