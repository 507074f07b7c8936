"""Service layer exports."""

from .analysis import AnalysisService
from .asset_resolver import AssetIdResolver, extract_file_records
from .coordinator import (
    AnalysisCoordinator,
    CoordinatorError,
    CoordinatorSnapshot,
    CoordinatorState,
)
from .file_validation import is_supported, validate_spreadsheet
from .insights_normalizer import InsightsNormalizer, NormalizedAnalysis
from .presenter import InsightsPresenter
from .sample_data import SAMPLE_INSIGHTS
from .upload import UploadOutcome, UploadService, build_upload_result

__all__ = [
    "AnalysisCoordinator",
    "AnalysisService",
    "AssetIdResolver",
    "CoordinatorError",
    "CoordinatorSnapshot",
    "CoordinatorState",
    "InsightsNormalizer",
    "InsightsPresenter",
    "NormalizedAnalysis",
    "SAMPLE_INSIGHTS",
    "UploadOutcome",
    "UploadService",
    "build_upload_result",
    "extract_file_records",
    "is_supported",
    "validate_spreadsheet",
]
