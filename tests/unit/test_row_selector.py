from __future__ import annotations

import pytest

from sheetdoc.models.classified_sheet import ClassifiedSheet, SheetRole
from sheetdoc.services.row_selector import (
    RowLimitExceededError,
    enforce_row_limit,
    filter_rows_for_rendering,
    merge_rows,
    select_rows_to_persist,
)


def _catalog():
    unit = ClassifiedSheet("a.xlsx", "หน่วย", SheetRole.UNIT, ("Unit_name",), 2,
                           rows=[{"Unit_name": "U1"}, {"Unit_name": "U2"}])
    content = ClassifiedSheet("a.xlsx", "เนื้อหา", SheetRole.CONTENT, ("content",), 1,
                              rows=[{"content": "C1"}])
    return {0: unit, 1: content}


def test_merge_rows_tags_provenance_in_index_order():
    rows = merge_rows(_catalog())
    assert [dict(r.values) for r in rows] == [{"Unit_name": "U1"}, {"Unit_name": "U2"}, {"content": "C1"}]
    assert [(r.file_index, r.row_index, r.role) for r in rows] == [
        (0, 0, SheetRole.UNIT),
        (0, 1, SheetRole.UNIT),
        (1, 0, SheetRole.CONTENT),
    ]
    assert rows[2].sheet_name == "เนื้อหา"


def test_row_limit_boundary(make_row):
    rows = [make_row({"a": i}) for i in range(1001)]
    enforce_row_limit(rows[:1000])
    with pytest.raises(RowLimitExceededError) as excinfo:
        enforce_row_limit(rows)
    assert excinfo.value.total == 1001
    assert excinfo.value.limit == 1000


def test_row_limit_is_configurable(make_row):
    with pytest.raises(RowLimitExceededError):
        enforce_row_limit([make_row({}), make_row({})], max_rows=1)


def test_persistence_policies(make_row):
    rows = [make_row({"x": 1}, SheetRole.CONTENT), make_row({"x": 2}, SheetRole.UNIT), make_row({"x": 3})]
    assert [r.values["x"] for r in select_rows_to_persist(rows, "Knowledge_sheet")] == [2]
    assert [r.values["x"] for r in select_rows_to_persist(rows, "Vocational_standard")] == [1]
    assert [r.values["x"] for r in select_rows_to_persist(rows, "course")] == [1, 2, 3]
    assert [r.values["x"] for r in select_rows_to_persist(rows, "unregistered")] == [1, 2, 3]
    assert select_rows_to_persist([], "Vocational_standard") == []


def test_render_filter_differs_from_persistence_for_vocational(make_row):
    rows = [make_row({"x": i}) for i in range(3)]
    assert len(filter_rows_for_rendering(rows, "Vocational_standard")) == 3
    assert filter_rows_for_rendering(rows, "Learning_management_plan") == []


def test_unit_only_may_be_empty(make_row):
    rows = [make_row({"x": 1}, SheetRole.TEST)]
    assert select_rows_to_persist(rows, "Unit_name") == []
