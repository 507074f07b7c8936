"""Client for the hosted asset upload API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import httpx

from datalens.core.errors import UploadTransportError
from datalens.schemas.files import LocalFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UploadReply:
    """Status and decoded body of one upload call."""

    status_code: int
    payload: Any
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class AssetUploadClient:
    """Forward files to the upload API as multipart form data."""

    def __init__(
        self,
        *,
        upload_url: str,
        api_key: str,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._upload_url = upload_url
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    async def upload(
        self,
        files: Sequence[LocalFile],
        *,
        field_name: str = "files",
    ) -> UploadReply:
        """POST ``files`` under ``field_name`` and return the raw reply.

        Non-JSON bodies decode to an empty mapping. Connection failures and
        timeouts raise ``UploadTransportError``.
        """
        multipart = [
            (
                field_name,
                (file.name, file.content, file.mime_type or "application/octet-stream"),
            )
            for file in files
        ]
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._upload_url,
                    headers={"x-api-key": self._api_key},
                    files=multipart,
                )
        except httpx.TransportError as exc:
            logger.error("Upload request failed: %s", exc)
            raise UploadTransportError(
                "Upload failed. Please check your connection and try again.",
                details={"reason": str(exc)},
            ) from exc

        text = response.text
        try:
            payload: Any = json.loads(text) if text else {}
        except json.JSONDecodeError:
            logger.error("Non-JSON upload response: %s", text[:500])
            payload = {}

        if not response.is_success:
            logger.error(
                "Upload API error",
                extra={"status_code": response.status_code, "field_name": field_name},
            )
        return UploadReply(status_code=response.status_code, payload=payload, text=text)


__all__ = ["AssetUploadClient", "UploadReply"]
