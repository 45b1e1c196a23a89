from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import SheetDocError
from ..models.sheet_table import RawRow, SheetTable
from ..models.upload import UploadedFile

"""Sheet reader: CSV / Excel upload -> normalized SheetTables.

- CSV: exactly one table, named after the upload's original file name.
- Excel (.xlsx / .xls): one table per worksheet (workbook order); worksheets without a
  data row are dropped silently.
- First row is the header. Headers and string values are trimmed; other values pass
  through (NaN -> None, numpy scalars -> Python scalars).
"""

__all__ = [
    "FileReadError",
    "EmptyDataError",
    "read_sheets",
    "read_csv_rows",
    "read_workbook_sheets",
    "normalize_frame",
]

logger = logging.getLogger(__name__)

_UNNAMED_PREFIX = "Unnamed:"


class FileReadError(SheetDocError):
    """Raised when an upload cannot be read (unsupported, malformed, unreadable)."""


class EmptyDataError(FileReadError):
    """Raised when a file yields zero usable data rows."""


def _clean_value(val: Any) -> Any:
    if val is None:
        return None
    if isinstance(val, str):
        return val.strip()
    if isinstance(val, float) and math.isnan(val):
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val.to_pydatetime()
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        # list-like cell values; leave untouched
        return val
    # numpy scalar -> python scalar
    if hasattr(val, "item"):
        return val.item()
    return val


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def normalize_frame(df: pd.DataFrame) -> list[RawRow]:
    """Normalize a DataFrame whose columns are the sheet header.

    Steps:
    1. Trim headers; drop placeholder headers (``Unnamed: N``) of entirely empty columns
    2. Trim string values, convert NaN to None
    3. Skip rows where every cell is blank
    """
    keep: list[tuple[Any, str]] = []
    for col in df.columns:
        header = str(col).strip()
        if header.startswith(_UNNAMED_PREFIX) and df[col].isna().all():
            continue
        keep.append((col, header))

    rows: list[RawRow] = []
    for raw in df.itertuples(index=False, name=None):
        by_col = dict(zip(df.columns, raw, strict=False))
        row: RawRow = {}
        for col, header in keep:
            row[header] = _clean_value(by_col[col])
        if all(_is_blank(v) for v in row.values()):
            continue
        rows.append(row)
    return rows


def read_csv_rows(path: Path) -> list[RawRow]:
    """Read a CSV file as strings (blank cells -> ""), header on the first line."""
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError:
        return []
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise FileReadError(f"cannot read csv {path.name}: {e}") from e
    return normalize_frame(df)


def read_workbook_sheets(path: Path) -> dict[str, list[RawRow]]:
    """Read every worksheet of a workbook; sheets with no data rows are dropped."""
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:  # pandas surfaces engine specific errors (zip, xlrd, openpyxl)
        raise FileReadError(f"cannot open workbook {path.name}: {e}") from e

    sheets: dict[str, list[RawRow]] = {}
    with xls:
        for name in xls.sheet_names:
            try:
                df = xls.parse(name, header=0, dtype=object)
            except Exception as e:
                raise FileReadError(f"cannot parse sheet '{name}' of {path.name}: {e}") from e
            rows = normalize_frame(df)
            if not rows:
                logger.debug("sheet=%s file=%s has no data rows -> dropped", name, path.name)
                continue
            sheets[str(name)] = rows
            logger.info("Sheet: \"%s\" -> %d rows", name, len(rows))
    return sheets


def read_sheets(upload: UploadedFile) -> dict[str, SheetTable]:
    """Load one upload into SheetTables keyed by sheet name.

    Raises:
        FileReadError: unsupported extension or unreadable file
        EmptyDataError: CSV without data rows / workbook without a non-empty sheet
    """
    path = Path(upload.stored_path)
    ext = upload.extension.lower()

    if ext == ".csv":
        rows = read_csv_rows(path)
        if not rows:
            raise EmptyDataError(f"file {upload.original_name} has no data rows")
        return {
            upload.original_name: SheetTable(
                origin_file_name=upload.original_name,
                sheet_name=upload.original_name,
                rows=rows,
            )
        }

    if ext in (".xlsx", ".xls"):
        by_sheet = read_workbook_sheets(path)
        if not by_sheet:
            raise EmptyDataError(f"file {upload.original_name} has no sheet with data")
        return {
            name: SheetTable(origin_file_name=upload.original_name, sheet_name=name, rows=rows)
            for name, rows in by_sheet.items()
        }

    raise FileReadError(f"unsupported file type '{ext}' for {upload.original_name}")
