from __future__ import annotations

import json

import jsonschema

from sheetdoc.config.loader import SCHEMA_PATH

"""Packaged config schema contract."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_is_valid_json_schema():
    jsonschema.Draft202012Validator.check_schema(_schema())


def test_schema_rejects_additional_properties():
    validator = jsonschema.Draft202012Validator(_schema())
    assert not validator.is_valid({"source_directory": "./data"})
    assert not validator.is_valid({"database": {"schema": "public"}})
    assert validator.is_valid({})
    assert validator.is_valid({"output_dir": "out", "database": {"dsn": None}})
