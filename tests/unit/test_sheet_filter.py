from __future__ import annotations

import pytest

from sheetdoc.models.classified_sheet import ClassifiedSheet, SheetRole
from sheetdoc.services.sheet_filter import NoMatchingSheetError, filter_sheets_by_template, required_sheet_keywords


def _sheet(name: str, role: SheetRole = SheetRole.UNKNOWN) -> ClassifiedSheet:
    return ClassifiedSheet(file_name="f.xlsx", sheet_name=name, role=role, columns=("a",), row_count=1, rows=[{"a": 1}])


def test_filter_keeps_matching_sheets_with_original_indices():
    catalog = {0: _sheet("Cover"), 1: _sheet("หน่วยการเรียนรู้"), 2: _sheet("UNIT list")}
    filtered = filter_sheets_by_template(catalog, "Unit_name")
    assert sorted(filtered) == [1, 2]
    assert filtered[2].sheet_name == "UNIT list"


def test_filter_is_case_insensitive_substring():
    catalog = {0: _sheet("My Course 2024")}
    assert list(filter_sheets_by_template(catalog, "course")) == [0]


def test_no_match_lists_required_and_found_sheets():
    catalog = {0: _sheet("Sheet1"), 1: _sheet("Sheet2")}
    with pytest.raises(NoMatchingSheetError) as excinfo:
        filter_sheets_by_template(catalog, "work_sheet")
    message = str(excinfo.value)
    assert "ใบงาน" in message
    assert "Sheet1, Sheet2" in message
    assert excinfo.value.found == ["Sheet1", "Sheet2"]


def test_unknown_template_has_no_keywords():
    assert required_sheet_keywords("no_such_template") == []
    with pytest.raises(NoMatchingSheetError):
        filter_sheets_by_template({0: _sheet("anything")}, "no_such_template")
