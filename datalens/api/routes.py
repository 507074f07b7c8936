"""
FastAPI routes for the DataLens upload and analysis proxy.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from datalens.core.errors import NetworkError, UploadTransportError
from datalens.dependencies import (
    get_analysis_service,
    get_app_settings,
    get_upload_service,
)
from datalens.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    InsightsResult,
    LocalFile,
    NormalizedUploadResult,
)
from datalens.services import SAMPLE_INSIGHTS

router = APIRouter()
logger = logging.getLogger(__name__)

_MISSING_KEY_MESSAGE = "LYZR_API_KEY not configured"


def _upload_response(result: NormalizedUploadResult, status_code: int) -> JSONResponse:
    return JSONResponse(content=result.model_dump(exclude_none=True), status_code=status_code)


async def _to_local_file(upload: UploadFile) -> LocalFile:
    return LocalFile(
        name=upload.filename or "upload",
        content=await upload.read(),
        mime_type=upload.content_type or "",
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/upload", status_code=HTTPStatus.OK)
async def upload_readiness() -> dict:
    """Static readiness payload for the upload endpoint."""
    return {"status": "ok", "upload": "POST only"}


@router.post("/upload", response_model=NormalizedUploadResult)
async def upload_files(
    settings: Annotated[Any, Depends(get_app_settings)],
    service: Annotated[Any, Depends(get_upload_service)],
    files: Annotated[list[UploadFile] | None, File()] = None,
    file: Annotated[list[UploadFile] | None, File()] = None,
) -> JSONResponse:
    """Forward uploaded spreadsheets and return the normalized upload result.

    Files may arrive under either the ``files`` or the ``file`` form field.
    """
    if not settings.lyzr.api_key:
        logger.error("Upload rejected: %s", _MISSING_KEY_MESSAGE)
        return _upload_response(
            NormalizedUploadResult.failure(
                message=_MISSING_KEY_MESSAGE,
                error=f"{_MISSING_KEY_MESSAGE} on server",
            ),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    uploads = [*(files or []), *(file or [])]
    if not uploads:
        return _upload_response(
            NormalizedUploadResult.failure(message="No files provided"),
            HTTPStatus.BAD_REQUEST,
        )

    local_files = [await _to_local_file(upload) for upload in uploads]
    try:
        outcome = await service.upload(local_files)
    except UploadTransportError as exc:
        logger.error("File upload error: %s", exc.message)
        return _upload_response(
            NormalizedUploadResult.failure(
                message="Server error during upload", error=exc.message
            ),
            HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    return _upload_response(outcome.result, outcome.status_code)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_assets(
    payload: AnalyzeRequest,
    settings: Annotated[Any, Depends(get_app_settings)],
    service: Annotated[Any, Depends(get_analysis_service)],
) -> Any:
    """Run the analysis agent over previously uploaded assets."""
    if not settings.lyzr.api_key:
        return JSONResponse(
            content=AnalyzeResponse(
                success=False, error=f"{_MISSING_KEY_MESSAGE} on server"
            ).model_dump(),
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )

    try:
        return await service.analyze(
            payload.asset_ids,
            message=payload.message,
            agent_id=payload.agent_id,
            session_id=payload.session_id,
        )
    except NetworkError as exc:
        return JSONResponse(
            content=AnalyzeResponse(
                success=False,
                error=exc.message,
                session_id=exc.details.get("session_id"),
            ).model_dump(),
            status_code=HTTPStatus.BAD_GATEWAY,
        )


@router.get("/insights/sample", response_model=InsightsResult)
async def sample_insights() -> InsightsResult:
    """Static example of a fully populated insights result."""
    return SAMPLE_INSIGHTS


__all__ = ["router"]
