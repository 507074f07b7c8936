"""In-memory representation of a file selected for upload."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path


def file_extension(name: str) -> str:
    """Lower-cased text after the last dot, or an empty string."""
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


@dataclass(frozen=True, slots=True)
class LocalFile:
    """A file held in memory until it is forwarded to the upload service."""

    name: str
    content: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return file_extension(self.name)

    @classmethod
    def from_path(cls, path: str | Path) -> "LocalFile":
        """Read a file from disk, guessing its MIME type from the name."""
        file_path = Path(path)
        mime_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            name=file_path.name,
            content=file_path.read_bytes(),
            mime_type=mime_type or "",
        )


__all__ = ["LocalFile", "file_extension"]
