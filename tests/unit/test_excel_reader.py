from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from sheetdoc.excel.reader import EmptyDataError, FileReadError, normalize_frame, read_sheets
from sheetdoc.models.upload import UploadedFile


def test_csv_is_one_table_named_after_file(write_csv):
    path = write_csv("course.csv", [" หลักสูตร ", "รหัสวิชา"], [["ปวช.", " 20104-2001 "], ["", ""]])
    tables = read_sheets(UploadedFile.from_path(path))
    assert list(tables) == ["course.csv"]
    table = tables["course.csv"]
    assert table.sheet_name == "course.csv"
    assert table.columns == ["หลักสูตร", "รหัสวิชา"]
    # all-blank rows are skipped, strings trimmed
    assert table.rows == [{"หลักสูตร": "ปวช.", "รหัสวิชา": "20104-2001"}]


def test_csv_without_data_rows(write_csv):
    path = write_csv("empty.csv", ["a", "b"], [])
    with pytest.raises(EmptyDataError):
        read_sheets(UploadedFile.from_path(path))


def test_workbook_sheets_in_order_and_empty_sheets_dropped(write_xlsx):
    path = write_xlsx(
        "units.xlsx",
        {
            "หน่วยการเรียนรู้": [{"Unit_name": "U1", "hours": 3}],
            "ว่าง": [],
            "เนื้อหา": [{"content": "C1"}, {"content": None}],
        },
    )
    tables = read_sheets(UploadedFile.from_path(path))
    assert list(tables) == ["หน่วยการเรียนรู้", "เนื้อหา"]
    assert tables["หน่วยการเรียนรู้"].rows == [{"Unit_name": "U1", "hours": 3}]
    assert tables["เนื้อหา"].row_count == 1


def test_workbook_without_data(write_xlsx):
    path = write_xlsx("blank.xlsx", {"Sheet1": []})
    with pytest.raises(EmptyDataError):
        read_sheets(UploadedFile.from_path(path))


def test_corrupt_workbook_is_read_error(temp_workdir: Path):
    path = temp_workdir / "data" / "broken.xlsx"
    path.write_bytes(b"not a zip")
    with pytest.raises(FileReadError):
        read_sheets(UploadedFile.from_path(path))


def test_unsupported_extension(temp_workdir: Path):
    path = temp_workdir / "data" / "notes.txt"
    path.write_text("x", encoding="utf-8")
    with pytest.raises(FileReadError) as excinfo:
        read_sheets(UploadedFile.from_path(path))
    assert not isinstance(excinfo.value, EmptyDataError)


def test_normalize_frame_drops_unnamed_empty_columns():
    df = pd.DataFrame({"a": [" x ", None], "Unnamed: 1": [None, None], "b": [1.0, float("nan")]})
    assert normalize_frame(df) == [{"a": "x", "b": 1.0}]


def test_uploaded_file_extension_from_original_name(tmp_path: Path):
    upload = UploadedFile.from_path(tmp_path / "123-456-Data.XLSX", original_name="Data.XLSX")
    assert upload.extension == ".xlsx"
    assert upload.original_name == "Data.XLSX"
