from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""UploadedFile model: descriptor handed over by the upload source."""

__all__ = [
    "UploadedFile",
    "SUPPORTED_EXTENSIONS",
]

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")


@dataclass(frozen=True)
class UploadedFile:
    original_name: str  # Name as given by the user
    stored_path: Path  # Staged copy inside the upload directory
    extension: str  # Lower-cased, with leading dot

    @staticmethod
    def from_path(stored_path: Path, original_name: str | None = None) -> UploadedFile:
        name = original_name or stored_path.name
        return UploadedFile(
            original_name=name,
            stored_path=stored_path,
            extension=Path(name).suffix.lower(),
        )
