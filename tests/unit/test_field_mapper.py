from __future__ import annotations

import math

import pytest

from sheetdoc.services.field_mapper import find_value, map_fields, split_code_description, strip_unit_prefix


def test_find_value_priority_order():
    row = {"course_code": "", "รหัสวิชา": "30001-0001"}
    assert find_value(row, ["course_code", "รหัสวิชา"]) == "30001-0001"
    row["course_code"] = "X1"
    assert find_value(row, ["course_code", "รหัสวิชา"]) == "X1"


@pytest.mark.parametrize("missing", [None, "", math.nan])
def test_find_value_skips_missing_values(missing):
    assert find_value({"a": missing, "b": 0}, ["a", "b"]) == 0


def test_find_value_defaults_to_empty_string():
    assert find_value({"a": None}, ["a", "missing"]) == ""
    assert find_value({}, []) == ""


@pytest.mark.parametrize("row", [None, "text", 42, ["a"]])
def test_find_value_never_raises(row):
    assert find_value(row, ["a"]) == ""


def test_map_fields_keeps_table_order():
    synonyms = {"name": ("Unit_name", "ชื่อหน่วย"), "outcome": ("Outcom",)}
    mapped = map_fields({"ชื่อหน่วย": "ไฟฟ้า"}, synonyms)
    assert list(mapped) == ["name", "outcome"]
    assert mapped == {"name": "ไฟฟ้า", "outcome": ""}


@pytest.mark.parametrize(
    "text,expected",
    [
        ("หน่วยที่ 3: วงจรไฟฟ้า", "วงจรไฟฟ้า"),
        ("Unit 12： Motors", "Motors"),
        ("unit 1:Intro", "Intro"),
        ("  วงจรไฟฟ้า ", "วงจรไฟฟ้า"),
        (None, ""),
    ],
)
def test_strip_unit_prefix(text, expected):
    assert strip_unit_prefix(text) == expected


def test_split_code_description():
    assert split_code_description("10101\nติดตั้ง\n\nระบบไฟฟ้า") == ("10101", "ติดตั้ง ระบบไฟฟ้า")
    assert split_code_description("only-code") == ("only-code", "")
    assert split_code_description("\n \n") == ("", "")
    assert split_code_description(None) == ("", "")
