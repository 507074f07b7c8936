"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the analysis coordinator
and the command line tools share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


DEFAULT_ASSET_ID_KEYS: tuple[str, ...] = (
    "asset_id",
    "assetId",
    "asset_ids",
    "assetIds",
    "id",
    "_id",
    "file_id",
    "fileId",
    "upload_id",
    "uploadId",
    "document_id",
    "documentId",
)

DEFAULT_ANALYSIS_PROMPT = (
    "Analyze this data file and provide a comprehensive executive summary with "
    "key findings, data patterns, anomalies, recommendations, and statistics."
)


class LyzrSettings(BaseSettings):
    """Configuration for the hosted asset upload and agent inference APIs."""

    model_config = SettingsConfigDict(env_prefix="LYZR_", extra="ignore")

    api_key: str = Field(
        "",
        description="Server-held API key. Empty means the upload proxy is unconfigured.",
    )
    upload_url: str = "https://agent-prod.studio.lyzr.ai/v3/assets/upload"
    inference_url: str = "https://agent-prod.studio.lyzr.ai/v3/inference/chat/"
    agent_id: str = "6996cd83744b96afe6ba69ee"
    user_id: str = Field(
        "datalens@localhost",
        description="Identifier reported to the agent API for every invocation.",
    )
    analysis_prompt: str = DEFAULT_ANALYSIS_PROMPT
    timeout_seconds: float = 120.0
    invoke_attempts: int = Field(2, ge=1)
    invoke_backoff_seconds: float = 1.0


class ResolverSettings(BaseSettings):
    """Tunables for asset identifier discovery in upload responses."""

    model_config = SettingsConfigDict(env_prefix="ASSET_ID_", extra="ignore")

    key_names: Annotated[tuple[str, ...], NoDecode] = DEFAULT_ASSET_ID_KEYS
    min_length: int = Field(10, ge=1)
    max_depth: int = Field(10, ge=0)

    @field_validator("key_names", mode="before")
    @classmethod
    def _split_key_names(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing key names as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(name.strip() for name in value.split(",") if name.strip())


class AppSettings(BaseSettings):
    """Root settings object for the DataLens service."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"
    log_level: str = "INFO"
    lyzr: LyzrSettings = Field(default_factory=LyzrSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_ANALYSIS_PROMPT",
    "DEFAULT_ASSET_ID_KEYS",
    "LyzrSettings",
    "ResolverSettings",
    "get_settings",
]
