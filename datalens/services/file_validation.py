"""Local checks applied to a selected file before it is uploaded."""

from __future__ import annotations

from datalens.core.errors import FileValidationError
from datalens.schemas.files import LocalFile, file_extension

ACCEPTED_EXTENSIONS: frozenset[str] = frozenset({"xlsx", "xls", "csv"})
ACCEPTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "text/csv",
    }
)
UNSUPPORTED_FORMAT_MESSAGE = "Unsupported format. Please upload .xlsx or .csv files only."


def is_supported(name: str, mime_type: str = "") -> bool:
    """A file passes when either its extension or its MIME type is accepted."""
    return file_extension(name) in ACCEPTED_EXTENSIONS or mime_type in ACCEPTED_MIME_TYPES


def validate_spreadsheet(file: LocalFile) -> LocalFile:
    """Return ``file`` unchanged or raise ``FileValidationError``."""
    if not is_supported(file.name, file.mime_type):
        raise FileValidationError(
            UNSUPPORTED_FORMAT_MESSAGE,
            details={"file_name": file.name, "mime_type": file.mime_type},
        )
    return file


__all__ = [
    "ACCEPTED_EXTENSIONS",
    "ACCEPTED_MIME_TYPES",
    "UNSUPPORTED_FORMAT_MESSAGE",
    "is_supported",
    "validate_spreadsheet",
]
