"""Public schema exports."""

from .insights import (
    AnalyzeRequest,
    AnalyzeResponse,
    Anomaly,
    DataPattern,
    InsightsResult,
    KeyFinding,
    Recommendation,
    Statistics,
)
from .files import LocalFile, file_extension
from .upload import NormalizedUploadResult, UploadedFileRecord

__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "Anomaly",
    "DataPattern",
    "InsightsResult",
    "KeyFinding",
    "LocalFile",
    "NormalizedUploadResult",
    "Recommendation",
    "Statistics",
    "UploadedFileRecord",
    "file_extension",
]
