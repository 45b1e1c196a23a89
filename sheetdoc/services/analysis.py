from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..errors import SheetDocError
from ..excel.reader import read_sheets
from ..models.classified_sheet import Catalog, ClassifiedSheet
from ..models.upload import UploadedFile
from .classifier import classify

"""File analysis: read every upload, classify every sheet, index the result.

Catalog indices are assigned in strict file order, then sheet order within a file
(workbook declaration order). Files are read one at a time.
"""

__all__ = [
    "FileAnalysisError",
    "analyze_uploaded_files",
    "catalog_metadata",
]

logger = logging.getLogger(__name__)


class FileAnalysisError(SheetDocError):
    """Reading or classifying an upload failed; ``file_name`` names the upload."""

    def __init__(self, file_name: str, reason: str) -> None:
        super().__init__(f"cannot read file {file_name}: {reason}")
        self.file_name = file_name


def analyze_uploaded_files(uploads: Iterable[UploadedFile]) -> Catalog:
    """Build the catalog of classified sheets for the uploaded files.

    Args:
        uploads: Upload descriptors in the order they were received

    Returns:
        Mapping index -> ClassifiedSheet (dense, zero-based)

    Raises:
        FileAnalysisError: wraps any read / classification failure of one file
    """
    catalog: Catalog = {}
    file_index = 0

    for upload in uploads:
        try:
            tables = read_sheets(upload)
            for sheet_name, table in tables.items():
                role = classify(table.first_row)
                catalog[file_index] = ClassifiedSheet(
                    file_name=upload.original_name,
                    sheet_name=sheet_name,
                    role=role,
                    columns=tuple(table.columns),
                    row_count=table.row_count,
                    rows=table.rows,
                    path=str(upload.stored_path),
                )
                logger.info(
                    "File: %s | Sheet: \"%s\" | Type: %s | Rows: %d",
                    upload.original_name,
                    sheet_name,
                    role.value,
                    table.row_count,
                )
                file_index += 1
        except Exception as e:
            logger.error("Error analyzing %s: %s", upload.original_name, e)
            raise FileAnalysisError(upload.original_name, str(e)) from e

    return catalog


def catalog_metadata(catalog: Catalog) -> dict[int, dict[str, Any]]:
    """Per-index summary ``{fileName, sheetName, type, rowCount, columns}``."""
    return {idx: entry.to_metadata() for idx, entry in catalog.items()}
