"""Error taxonomy shared by the upload, analysis and coordination layers."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """User-facing failure categories."""

    CONFIGURATION = "ConfigurationError"
    VALIDATION = "ValidationError"
    UPLOAD_TRANSPORT = "UploadTransportError"
    RESOLUTION_EMPTY = "ResolutionEmpty"
    ANALYSIS_FAILED = "AnalysisFailed"
    NETWORK = "NetworkError"


class DataLensError(Exception):
    """Base class for failures that carry a human-readable message."""

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(DataLensError):
    """Raised when a required server credential is absent."""

    kind = ErrorKind.CONFIGURATION


class FileValidationError(DataLensError):
    """Raised when a file is rejected locally, before any network call."""

    kind = ErrorKind.VALIDATION


class UploadTransportError(DataLensError):
    """Raised when the upload service is unreachable or answers non-2xx."""

    kind = ErrorKind.UPLOAD_TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class ResolutionEmptyError(DataLensError):
    """Raised when an upload succeeded but no asset identifier was found."""

    kind = ErrorKind.RESOLUTION_EMPTY


class AnalysisFailedError(DataLensError):
    """Raised when the agent reports failure or returns nothing usable."""

    kind = ErrorKind.ANALYSIS_FAILED


class NetworkError(DataLensError):
    """Raised when the agent invocation fails at the transport level."""

    kind = ErrorKind.NETWORK


__all__ = [
    "AnalysisFailedError",
    "ConfigurationError",
    "DataLensError",
    "ErrorKind",
    "FileValidationError",
    "NetworkError",
    "ResolutionEmptyError",
    "UploadTransportError",
]
