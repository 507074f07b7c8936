"""
Service that forwards uploads and normalizes the upstream reply.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from datalens.clients import AssetUploadClient
from datalens.schemas import LocalFile, NormalizedUploadResult
from datalens.services.asset_resolver import (
    AssetIdResolver,
    describe_response,
    extract_file_records,
)
from datalens.utils.http import response_detail

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Normalized result plus the HTTP status it should be served with."""

    status_code: int
    result: NormalizedUploadResult


def _positive_int(raw: Any, key: str) -> int | None:
    if not isinstance(raw, Mapping):
        return None
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return None


def build_upload_result(
    raw: Any,
    *,
    file_count: int,
    resolver: AssetIdResolver,
) -> NormalizedUploadResult:
    """Normalize a 2xx upload response body."""
    asset_ids = resolver.resolve_accepted(raw)
    records = extract_file_records(raw, asset_ids)

    diagnostics: dict[str, Any] = {}
    if asset_ids:
        message = f"Successfully uploaded {len(asset_ids)} file(s)"
    else:
        message = "Upload completed but no asset IDs were returned"
        diagnostics = describe_response(raw)
        logger.error(
            "Upload succeeded but no asset_ids extracted",
            extra={"raw_keys": diagnostics["raw_keys"]},
        )

    total_files = _positive_int(raw, "total_files") or file_count
    successful = _positive_int(raw, "successful_uploads") or len(asset_ids)
    failed = _positive_int(raw, "failed_uploads") or (0 if asset_ids else file_count)

    return NormalizedUploadResult(
        success=bool(asset_ids),
        asset_ids=asset_ids,
        files=records,
        total_files=total_files,
        successful_uploads=successful,
        failed_uploads=failed,
        message=message,
        error=None if asset_ids else message,
        raw_keys=diagnostics.get("raw_keys")
        or ([str(key) for key in raw.keys()] if isinstance(raw, Mapping) else None),
        raw_preview=diagnostics.get("raw_preview"),
    )


class UploadService:
    """Proxy uploads to the asset API and return a stable result envelope."""

    def __init__(self, client: AssetUploadClient, resolver: AssetIdResolver) -> None:
        self._client = client
        self._resolver = resolver

    async def upload(
        self, files: Sequence[LocalFile], *, field_name: str = "files"
    ) -> UploadOutcome:
        """Forward ``files`` upstream.

        ``UploadTransportError`` propagates when the service is unreachable.
        """
        reply = await self._client.upload(files, field_name=field_name)

        if reply.ok:
            result = build_upload_result(
                reply.payload, file_count=len(files), resolver=self._resolver
            )
            logger.info(
                "Upload normalized",
                extra={"asset_count": len(result.asset_ids), "file_count": len(files)},
            )
            return UploadOutcome(status_code=200, result=result)

        error = response_detail(reply.payload, reply.text or "Upload failed")
        return UploadOutcome(
            status_code=reply.status_code,
            result=NormalizedUploadResult.failure(
                message=f"Upload failed with status {reply.status_code}",
                error=error,
                total_files=len(files),
                failed_uploads=len(files),
            ),
        )


__all__ = ["UploadOutcome", "UploadService", "build_upload_result"]
