"""
Pydantic models describing the normalized upload result.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UploadedFileRecord(BaseModel):
    """Outcome of a single file reported by the upload service."""

    model_config = ConfigDict(frozen=True)

    asset_id: str = Field("", description="Identifier assigned by the upload service.")
    file_name: str = Field("", description="Original file name, when reported.")
    success: bool = True
    error: Optional[str] = None


class NormalizedUploadResult(BaseModel):
    """Stable response envelope returned for every upload attempt."""

    model_config = ConfigDict(frozen=True)

    success: bool = False
    asset_ids: list[str] = Field(default_factory=list)
    files: list[UploadedFileRecord] = Field(default_factory=list)
    total_files: int = 0
    successful_uploads: int = 0
    failed_uploads: int = 0
    message: str = ""
    timestamp: str = Field(default_factory=_utcnow_iso)
    error: Optional[str] = None
    raw_keys: Optional[list[str]] = Field(
        None,
        description="Top-level keys of the upstream body, kept for debugging.",
    )
    raw_preview: Optional[str] = Field(
        None,
        description="Truncated upstream body when no identifier could be resolved.",
    )

    @model_validator(mode="after")
    def _success_tracks_asset_ids(self) -> "NormalizedUploadResult":
        if self.success != bool(self.asset_ids):
            raise ValueError("success must be true exactly when asset_ids is non-empty")
        return self

    @classmethod
    def failure(
        cls,
        *,
        message: str,
        error: str | None = None,
        total_files: int = 0,
        failed_uploads: int = 0,
    ) -> "NormalizedUploadResult":
        """Build a failed result carrying no identifiers."""
        return cls(
            success=False,
            total_files=total_files,
            failed_uploads=failed_uploads,
            message=message,
            error=error if error is not None else message,
        )


__all__ = ["NormalizedUploadResult", "UploadedFileRecord"]
